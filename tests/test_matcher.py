from i18n_extract.matcher import RegexSpanMatcher


def test_finds_runs_in_order():
    matcher = RegexSpanMatcher()
    text = 'title: "你好", label: \'保存成功\', count: 3, note: "世界"'
    assert list(matcher.find_spans(text)) == ["你好", "保存成功", "世界"]


def test_punctuation_splits_runs():
    matcher = RegexSpanMatcher()
    assert list(matcher.find_spans("你好，世界！")) == ["你好", "世界"]


def test_single_line_comments_are_ignored():
    matcher = RegexSpanMatcher()
    text = "const a = '确定' // 你好\n"
    assert list(matcher.find_spans(text)) == ["确定"]


def test_block_comments_are_ignored():
    matcher = RegexSpanMatcher()
    text = "/* 你好\n 多行注释 */\nconst b = '取消'"
    assert list(matcher.find_spans(text)) == ["取消"]


def test_line_comment_marker_inside_block_comment():
    matcher = RegexSpanMatcher()
    text = "/* see // 注释 */ const c = '提交'"
    assert list(matcher.find_spans(text)) == ["提交"]


def test_each_call_starts_a_new_scan():
    matcher = RegexSpanMatcher()
    first = matcher.find_spans("'你好'")
    second = matcher.find_spans("'你好'")
    assert list(first) == ["你好"]
    assert list(second) == ["你好"]


def test_comment_stripping_can_be_disabled():
    matcher = RegexSpanMatcher(single_line_comment=None, multi_line_comment=None)
    assert list(matcher.find_spans("// 你好")) == ["你好"]


def test_custom_script_pattern():
    matcher = RegexSpanMatcher(r"[぀-ヿ]+")
    assert list(matcher.find_spans("'こんにちは' '你好'")) == ["こんにちは"]
