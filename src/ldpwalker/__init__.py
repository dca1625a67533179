"""Walk a Linked Data Platform (LDP) resource tree and count its resources."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version('ldp-walker')
except PackageNotFoundError:
    # running from a source checkout that has not been installed
    __version__ = '0.0.0'
