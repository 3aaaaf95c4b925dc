"""DL/T 645-2007 meter protocol: BCD helpers, frames, serial transport and client."""

__version__ = "0.1.0"