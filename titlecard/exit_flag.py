"""Interrupt handling shared by the scan loop and the CLI.

The CLI signal handler sets this flag; the decode loop checks it between
packets and raises ScanCancelled when it is set.
"""

import threading

FORCE_EXIT = threading.Event()
