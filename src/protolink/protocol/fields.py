"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Every envelope carries its correlation tag in this field.
TAG = "tag"

# Status code for a reply that acknowledges success.
OK = "OK"

# Length-prefix framing: unsigned 16-bit big-endian header.
LENGTH_HEADER = ">H"
LENGTH_MAX = 0xFFFF

# A 32-bit length never needs more than five varint bytes.
VARINT_MAX_BYTES = 5

# Correlation tags are unsigned 32-bit integers.
TAG_MIN = 0
TAG_MAX = 0xFFFFFFFF
