"""focusdim - dim unfocused windows on i3-protocol window managers.

Listens to window focus events over the window manager IPC socket, keeps the
focused window fully opaque and dims the window that previously had the focus
on the same workspace. The daemon runs as a single asyncio loop.
"""

__version__ = "0.3.0"
