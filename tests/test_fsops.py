from __future__ import annotations

import json
import os

import pytest

from otpbundle.core.app.fsops import cp_r, ln_sf, mkdir_p, rm_rf
from otpbundle.core.errors import FilesystemError
from otpbundle.core.ops_log import InstallJournal
from tests.helpers.project import read_text, tree_files, write_text


def test_rm_rf_handles_trees_files_links_and_missing(tmp_path):
    tree = tmp_path / "tree"
    write_text(str(tree / "a" / "b.txt"), "x")
    outside = write_text(str(tmp_path / "outside.txt"), "keep")
    link = tmp_path / "link"
    os.symlink(outside, link)

    rm_rf(str(link))
    assert not os.path.lexists(link)
    assert os.path.exists(outside)

    rm_rf(str(tree))
    assert not tree.exists()
    rm_rf(str(tree))
    rm_rf(outside)
    assert not os.path.exists(outside)


def test_cp_r_copies_into_dest_and_keeps_symlinks(tmp_path):
    src = tmp_path / "proj"
    write_text(str(src / "ebin" / "foo.beam"), "beam")
    write_text(str(src / "priv" / "data.txt"), "data")
    os.symlink("data.txt", src / "priv" / "alias")
    dest = tmp_path / "dest"
    mkdir_p(str(dest))

    out = cp_r([str(src / "ebin"), str(src / "priv")], str(dest))

    assert out == [str(dest / "ebin"), str(dest / "priv")]
    assert tree_files(str(dest)) == ["ebin/foo.beam", "priv/alias", "priv/data.txt"]
    assert os.path.islink(dest / "priv" / "alias")


def test_cp_r_failure_is_filesystem_error(tmp_path):
    with pytest.raises(FilesystemError) as ei:
        cp_r([str(tmp_path / "missing")], str(tmp_path))
    assert ei.value.context["op"] == "cp_r"


def test_ln_sf_replaces_existing_link(tmp_path):
    bin_dir = tmp_path / "bin"
    mkdir_p(str(bin_dir))
    old = write_text(str(tmp_path / "old" / "tool"), "old")
    new = write_text(str(tmp_path / "new" / "tool"), "new")

    ln_sf(old, str(bin_dir))
    link = ln_sf(new, str(bin_dir))

    assert link == str(bin_dir / "tool")
    assert read_text(link) == "new"


def test_ln_sf_into_missing_dir_fails(tmp_path):
    with pytest.raises(FilesystemError):
        ln_sf(str(tmp_path / "tool"), str(tmp_path / "nope"))


def test_journal_appends_json_lines(tmp_path):
    journal = InstallJournal(path=str(tmp_path / "logs" / "install.jsonl"))
    journal.log(op="install", outcome="ok", details={"app_id": "foo-1.0"})
    journal.log(op="clean", outcome="ok")

    with open(journal.path, "r", encoding="utf-8") as f:
        entries = [json.loads(line) for line in f]
    assert [e["op"] for e in entries] == ["install", "clean"]
    assert entries[0]["details"] == {"app_id": "foo-1.0"}
    assert entries[1]["details"] == {}
    assert set(entries[0]) == {"ts", "op", "outcome", "details"}
