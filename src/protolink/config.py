""" Process-wide settings, read once from the environment at import time.
"""

import logging
import os


DELIMITED = 'delimited'
LENGTH = 'length'

framings = (DELIMITED, LENGTH)

framing = os.environ.get('PROTOLINK_FRAMING', DELIMITED).strip().lower()

if framing not in framings:
    raise ValueError('unknown PROTOLINK_FRAMING: ' + repr(framing))

# protobuf-style delimited streams cap a single message at 64 MiB; the same
# limit applies here unless overridden.

max_frame = int(os.environ.get('PROTOLINK_MAX_FRAME', 64 * 1024 * 1024))

log_level = os.environ.get('PROTOLINK_LOG_LEVEL', 'INFO').strip().upper()
log_format = os.environ.get('PROTOLINK_LOG_FORMAT',
        '%(asctime)s %(levelname)s %(name)s: %(message)s')

if not isinstance(logging.getLevelName(log_level), int):
    raise ValueError('unknown PROTOLINK_LOG_LEVEL: ' + repr(log_level))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
