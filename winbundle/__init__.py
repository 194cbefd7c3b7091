"""
winbundle: Java App Packager for Windows

Assembles a Maven-built application into a self-contained directory started by
a WinRun4J launcher: lib/, bin/, config/, licenses/, an optional pruned jvm/,
and <AppName>.exe with its launcher INI embedded.
"""

__version__ = "0.1.0"
