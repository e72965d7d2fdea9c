import zlib
from datetime import datetime, timedelta, timezone

import pytest
from gitchrono.git_objects.models import CommitMetadata, CommitObject, Signature
from gitchrono.git_objects.parser import enumerate_objects, read_loose_type, read_object

def test_signature_parse_keeps_offset():
    sig = Signature.parse("Me <me@example.com> 1234567890 -0500")
    assert sig.name == "Me"
    assert sig.email == "me@example.com"
    assert sig.when == datetime(2009, 2, 13, 23, 31, 30, tzinfo=timezone.utc)
    assert sig.when.utcoffset() == timedelta(hours=-5)

def test_signature_parse_half_hour_offset():
    sig = Signature.parse("Ravi Kumar <ravi@example.in> 0 +0530")
    assert sig.name == "Ravi Kumar"
    assert sig.when.utcoffset() == timedelta(hours=5, minutes=30)
    assert sig.when == datetime(1970, 1, 1, tzinfo=timezone.utc)

def test_signature_parse_before_epoch():
    sig = Signature.parse("Old <old@example.com> -86400 +0000")
    assert sig.when == datetime(1969, 12, 31, tzinfo=timezone.utc)

def test_signature_parse_empty_name():
    sig = Signature.parse("<bot@example.com> 10 +0000")
    assert sig.name == ""
    assert sig.identity() == " <bot@example.com>"

def test_signature_parse_rejects_garbage():
    with pytest.raises(ValueError):
        Signature.parse("Me <me@example.com>")

def test_signature_parse_rejects_out_of_range_date():
    with pytest.raises(ValueError):
        Signature.parse("X <x@x> 99999999999999 +0000")

def test_signature_serialize():
    when = datetime(2009, 2, 13, 18, 31, 30, tzinfo=timezone(timedelta(hours=-5)))
    sig = Signature("Me", "me@example.com", when)
    assert sig.serialize() == "Me <me@example.com> 1234567890 -0500"

def test_commit_serialization():
    commit = CommitObject(
        tree_oid="abc",
        parent_oids=["def", "123"],
        author="Me <me@example.com> 1234567890 -0500",
        committer="Me <me@example.com> 1234567890 -0500",
        message="Initial commit"
    )

    data = commit.serialize()
    assert b"tree abc" in data
    assert data.index(b"parent def") < data.index(b"parent 123")
    assert b"author Me" in data
    assert b"Initial commit" in data

def test_commit_deserialization():
    data = (
        b"tree abc\n"
        b"parent def\n"
        b"parent 456\n"
        b"author Me <me@example.com> 100 +0000\n"
        b"committer You <you@example.com> 200 +0100\n"
        b"gpgsig -----BEGIN PGP SIGNATURE-----\n"
        b"\n"
        b"Initial commit"
    )
    commit = CommitObject.deserialize(data)
    assert commit.tree_oid == "abc"
    assert commit.parent_oids == ["def", "456"]
    assert commit.message == "Initial commit"

    metadata = CommitMetadata.from_commit("f" * 40, commit)
    assert metadata.parent_oids == ["def", "456"]
    assert metadata.author.identity() == "Me <me@example.com>"
    assert metadata.author_time == datetime(1970, 1, 1, 0, 1, 40, tzinfo=timezone.utc)
    assert metadata.committer_time == datetime(1970, 1, 1, 0, 3, 20, tzinfo=timezone.utc)

def _write_loose(git_dir, store):
    import hashlib
    oid = hashlib.sha1(store).hexdigest()
    obj_dir = git_dir / "objects" / oid[:2]
    obj_dir.mkdir(parents=True, exist_ok=True)
    (obj_dir / oid[2:]).write_bytes(zlib.compress(store))
    return oid

def test_read_object_real_file(tmp_path):
    git_dir = tmp_path / ".git"
    (git_dir / "objects").mkdir(parents=True)

    content = (
        b"tree 4b825dc642cb6eb9a060e54bf8d69288fbee4904\n"
        b"author Me <me@example.com> 100 +0000\n"
        b"committer Me <me@example.com> 100 +0000\n"
        b"\n"
        b"Root"
    )
    oid = _write_loose(git_dir, b"commit %d\0" % len(content) + content)

    obj = read_object(oid, git_dir)
    assert isinstance(obj, CommitObject)
    assert obj.parent_oids == []
    assert obj.message == "Root"
    assert obj.oid == oid
    assert read_loose_type(oid, git_dir) == b"commit"

def test_read_object_rejects_blob(tmp_path):
    git_dir = tmp_path / ".git"
    (git_dir / "objects").mkdir(parents=True)
    oid = _write_loose(git_dir, b"blob 11\0hello world")
    assert oid == "95d09f2b10159347eece71399a7e2e907ea3df4f"

    assert read_loose_type(oid, git_dir) == b"blob"
    with pytest.raises(ValueError):
        read_object(oid, git_dir)

def test_read_object_invalid_oid(tmp_path):
    with pytest.raises(ValueError):
        read_object("abc", tmp_path)

def test_read_object_corrupt(tmp_path):
    git_dir = tmp_path / ".git"
    oid = "ab" * 20
    path = git_dir / "objects" / oid[:2] / oid[2:]
    path.parent.mkdir(parents=True)
    path.write_bytes(b"definitely not zlib")

    with pytest.raises(ValueError):
        read_object(oid, git_dir)

def test_enumerate_objects(tmp_path):
    git_dir = tmp_path / ".git"
    objects_dir = git_dir / "objects"
    objects_dir.mkdir(parents=True)

    # Create two objects
    (objects_dir / "3b").mkdir()
    (objects_dir / "3b" / "18e512dba79e4c8300dd08aeb37f8e728b8dad").touch()
    (objects_dir / "ab").mkdir()
    (objects_dir / "ab" / "cdef12345678901234567890123456789012").touch()
    # Not object directories
    (objects_dir / "pack").mkdir()
    (objects_dir / "info").mkdir()

    oids = enumerate_objects(git_dir)

    assert len(oids) == 2
    assert "3b18e512dba79e4c8300dd08aeb37f8e728b8dad" in oids
    assert "abcdef12345678901234567890123456789012" in oids

def test_enumerate_objects_missing_dir(tmp_path):
    assert enumerate_objects(tmp_path / ".git") == []
