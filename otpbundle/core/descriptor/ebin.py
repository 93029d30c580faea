from __future__ import annotations

import os
from typing import List

from otpbundle.core.descriptor.terms import Atom

BEAM_EXT = ".beam"


def list_compiled_modules(ebin_dir: str) -> List[str]:
    """
    Module names for every `*.beam` directly inside `ebin_dir`, sorted and unique.
    A missing directory yields an empty list.
    """
    if not os.path.isdir(ebin_dir):
        return []
    mods = set()
    for name in os.listdir(ebin_dir):
        if not name.endswith(BEAM_EXT):
            continue
        if not os.path.isfile(os.path.join(ebin_dir, name)):
            continue
        mods.add(name[: -len(BEAM_EXT)])
    return [Atom(m) for m in sorted(mods)]
