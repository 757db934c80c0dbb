import pytest

from rvtool.engine import RubyEngine


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ruby", RubyEngine.RUBY),
        ("jruby", RubyEngine.JRUBY),
        ("truffleruby", RubyEngine.TRUFFLERUBY),
        ("mruby", RubyEngine.MRUBY),
        ("artichoke", RubyEngine.ARTICHOKE),
        ("custom-ruby", RubyEngine("custom-ruby")),
    ],
)
def test_ruby_engine_parse(text, expected):
    assert RubyEngine.parse(text) == expected


def test_known_and_unknown():
    assert RubyEngine.parse("jruby").is_known
    assert not RubyEngine.parse("custom-ruby").is_known


def test_ruby_engine_name():
    assert RubyEngine.RUBY.name() == "ruby"
    assert RubyEngine.JRUBY.name() == "jruby"
    assert RubyEngine("custom-ruby").name() == "custom-ruby"
    assert str(RubyEngine.TRUFFLERUBY) == "truffleruby"


def test_engine_ordering():
    ruby = RubyEngine.RUBY
    jruby = RubyEngine.JRUBY
    truffleruby = RubyEngine.TRUFFLERUBY
    unknown = RubyEngine("custom-ruby")

    assert ruby < jruby
    assert ruby < truffleruby
    assert ruby < unknown

    assert jruby < unknown
    assert truffleruby < unknown

    assert jruby < truffleruby


def test_unknown_engine_sorts_after_known_even_alphabetically_earlier():
    assert RubyEngine("aaa") > RubyEngine.TRUFFLERUBY
    assert RubyEngine("aaa") < RubyEngine("zzz")


def test_sorted_engines():
    engines = [
        RubyEngine("picoruby"),
        RubyEngine.MRUBY,
        RubyEngine.RUBY,
        RubyEngine.ARTICHOKE,
    ]
    assert [e.name() for e in sorted(engines)] == [
        "ruby",
        "artichoke",
        "mruby",
        "picoruby",
    ]


def test_hash_consistent_with_equality():
    assert {RubyEngine.parse("jruby"), RubyEngine.JRUBY} == {RubyEngine.JRUBY}