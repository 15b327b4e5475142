"""debsweep - disk space reclamation for Debian hosts."""

from debsweep.constants import VERSION

__version__ = VERSION
