from vodcollect.collector.playlist import parse_play_urls


def _pairs(source):
    return [(ep.name, ep.url) for ep in source.urls]


def test_multi_episode_list_is_shared_by_every_source():
    sources = parse_play_urls("A,B", "ep1$http://x/1#ep2$http://x/2")

    assert [s.source_name for s in sources] == ["A", "B"]
    for source in sources:
        assert _pairs(source) == [("ep1", "http://x/1"), ("ep2", "http://x/2")]


def test_single_url_without_dollar_has_empty_name():
    sources = parse_play_urls("A", "http://x/1")

    assert len(sources) == 1
    assert sources[0].source_name == "A"
    assert _pairs(sources[0]) == [("", "http://x/1")]


def test_single_episode_with_dollar():
    sources = parse_play_urls("A", "Full$http://x/movie.m3u8")
    assert _pairs(sources[0]) == [("Full", "http://x/movie.m3u8")]


def test_missing_or_empty_play_url():
    assert parse_play_urls("A", None) == []
    assert parse_play_urls("A", "") == []


def test_blank_segments_dropped_and_names_trimmed():
    sources = parse_play_urls(" A , B", "ep1$u1##ep2$u2#")

    assert [s.source_name for s in sources] == ["A", "B"]
    assert _pairs(sources[0]) == [("ep1", "u1"), ("ep2", "u2")]


def test_segment_without_dollar_in_list_keeps_name():
    sources = parse_play_urls("A", "ep1#ep2$u2")
    assert _pairs(sources[0]) == [("ep1", ""), ("ep2", "u2")]


def test_only_separators_yields_nothing():
    assert parse_play_urls("A,B", "###") == []


def test_split_on_first_dollar_only():
    sources = parse_play_urls("A", "ep$1$http://x/1#ep2$u")
    assert _pairs(sources[0])[0] == ("ep", "1$http://x/1")
