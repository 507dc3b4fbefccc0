from esg.utils.textnorm import collapse_whitespace, normalize_hyphenation


def test_dehyphenation_example():
    raw = "Scope 3 green-\nhouse gas emissions"
    out = normalize_hyphenation(raw)
    assert out == "Scope 3 greenhouse gas emissions"


def test_soft_hyphen_removed():
    raw = "sustain\u00adability"
    out = normalize_hyphenation(raw)
    assert out == "sustainability"


def test_hyphen_kept_inside_line():
    raw = "Net-zero roadmap and low-carbon products"
    out = normalize_hyphenation(raw)
    assert out == raw  # should not touch real hyphens


def test_cjk_wrap_joined():
    raw = "本公司溫室氣體\n排放總量下降"
    out = normalize_hyphenation(raw)
    assert out == "本公司溫室氣體排放總量下降"


def test_newline_kept_before_numbered_heading():
    raw = "永續治理\n2. 環境保護"
    out = normalize_hyphenation(raw)
    assert out == raw


def test_spaces_and_nbsp():
    raw = "renewable\u00a0 energy\u3000share"
    out = normalize_hyphenation(raw)
    assert out == "renewable energy share"


def test_collapse_whitespace():
    assert collapse_whitespace("  a\n\n b\t c  ") == "a b c"
    assert collapse_whitespace("") == ""
