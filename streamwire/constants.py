# Line terminator used by read_line(), write_line() and write_lines().
DEFAULT_ENDING = '\r\n'

# Seconds a read request may stay pending before it is rejected.
DEFAULT_TIMEOUT = 5.0

DEFAULT_AUTO_RESUME = True
