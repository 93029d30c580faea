"""
Application descriptors: Erlang term codec, typed model and on-disk loading.
"""

from otpbundle.core.descriptor.ebin import list_compiled_modules
from otpbundle.core.descriptor.loader import (
    app_src_to_app,
    app_stem,
    find_descriptor,
    is_app_src,
    load_descriptor,
    write_descriptor,
)
from otpbundle.core.descriptor.models import AppDescriptor
from otpbundle.core.descriptor.terms import Atom, TermSyntaxError

__all__ = [
    "AppDescriptor",
    "Atom",
    "TermSyntaxError",
    "app_src_to_app",
    "app_stem",
    "find_descriptor",
    "is_app_src",
    "list_compiled_modules",
    "load_descriptor",
    "write_descriptor",
]
