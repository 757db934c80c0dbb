import pytest

from rvtool.version import Version, VersionError


def v(text):
    return Version(text)


def test_version_creation():
    assert v("1.0").version == "1.0"
    assert v("1.2.3").version == "1.2.3"
    assert v("5.2.4").version == "5.2.4"


def test_whitespace_handling():
    assert v("1.0 ").version == "1.0"
    assert v(" 1.0 ").version == "1.0"
    assert v("1.0\n").version == "1.0"
    assert v("\n1.0\n").version == "1.0"


@pytest.mark.parametrize("text", ["", "   ", " ", "\t"])
def test_empty_string_defaults_to_zero(text):
    assert v(text).version == "0"


def test_default_is_zero():
    assert Version().version == "0"
    assert Version().segments == (0,)


@pytest.mark.parametrize(
    "text",
    [
        "junk",
        "1.0\n2.0",
        "1..2",
        "1.2 3.4",
        "2.3422222.222.222222222.22222.ads0as.dasd0.ddd2222.2.qd3e.",
    ],
)
def test_invalid_versions(text):
    with pytest.raises(VersionError):
        Version(text)


def test_error_messages():
    with pytest.raises(VersionError, match="pure alphabetic"):
        Version("junk")
    with pytest.raises(VersionError, match="consecutive dots"):
        Version("1..2")
    with pytest.raises(VersionError, match="newlines"):
        Version("1.0\n2.0")
    with pytest.raises(VersionError, match="Malformed"):
        Version("1.2.")
    with pytest.raises(VersionError, match="Invalid segment in version: 2\\$") as info:
        Version("1.2$")
    assert info.value.value == "2$"


def test_version_equality():
    assert v("1.0") == v("1.0.0")
    assert v("") == v("0")
    assert hash(v("1.0")) == hash(v("1.0.0"))


def test_version_ordering():
    assert v("1.8.2") > v("0.0.0")
    assert v("1.8.2") > v("1.8.2.a")
    assert v("1.8.2.b") > v("1.8.2.a")
    assert v("1.8.2.a10") > v("1.8.2.a9")


@pytest.mark.parametrize(
    "text", ["1.2.0.a", "2.9.b", "22.1.50.0.d", "1.2.d.42", "1.A", "1-1", "1-a"]
)
def test_prerelease_detection(text):
    assert v(text).is_prerelease()


@pytest.mark.parametrize("text", ["1.2.0", "2.9", "22.1.50.0"])
def test_not_prerelease(text):
    assert not v(text).is_prerelease()


def test_segments():
    assert v("9.8.7").segments == (9, 8, 7)
    assert v("1.0.0").segments == (1, 0, 0)
    assert v("1.0.0.a.1.0").segments == (1, 0, 0, "a", 1, 0)
    assert v("1.2.3-1").segments == (1, 2, 3, "pre", 1)


def test_canonical_segments():
    assert v("1.0.0").canonical_segments() == (1,)
    assert v("1.0.0.a.1.0").canonical_segments() == (1, "a", 1)
    assert v("1.2.3-1").canonical_segments() == (1, 2, 3, "pre", 1)


def test_release_conversion():
    assert v("1.2.0.a").release() == v("1.2.0")
    assert v("1.1.rc10").release() == v("1.1")
    assert v("1.9.3.alpha.5").release() == v("1.9.3")
    assert v("1.9.3").release() == v("1.9.3")
    assert v("1.1.rc10").release().version == "1.1"


def test_version_bump():
    assert v("5.2.4").bump() == v("5.3")
    assert v("5.2.4.a").bump() == v("5.3")
    assert v("5.2.4.a10").bump() == v("5.3")
    assert v("5.0.0").bump() == v("5.1")
    assert v("5").bump() == v("6")
    assert v("5.2.4").bump().version == "5.3"


def test_semver_style_comparisons():
    assert v("1.0.0-alpha") < v("1.0.0")
    assert v("1.0.0-alpha.1") < v("1.0.0-beta.2")
    assert v("1.0.0-beta.2") < v("1.0.0-beta.11")
    assert v("1.0.0-beta.11") < v("1.0.0-rc.1")
    assert v("1.0.0-rc1") < v("1.0.0")


def test_ord():
    assert v("1.0") == v("1.0.0")
    assert v("1.0") > v("1.0.a")
    assert v("1.8.2") > v("0.0.0")
    assert v("1.8.2") > v("1.8.2.a")
    assert v("1.8.2.b") > v("1.8.2.a")
    assert v("1.8.2.a") < v("1.8.2")
    assert v("1.8.2.a10") > v("1.8.2.a9")
    assert v("") == v("0")

    assert v("0.beta.1") == v("0.0.beta.1")
    assert v("0.0.beta") < v("0.0.beta.1")
    assert v("0.0.beta") < v("0.beta.1")

    assert v("5.a") < v("5.0.0.rc2")
    assert v("5.x") > v("5.0.0.rc2")


def test_sorting():
    versions = [v("1.10"), v("1.2.a"), v("1.2"), v("0.9")]
    assert [str(x) for x in sorted(versions)] == ["0.9", "1.2.a", "1.2", "1.10"]