"""CQ 码解析测试"""

from telegram_adapter_protocol import CQSegment, escape, parse_all, unescape


class TestEscape:

    def test_text(self):
        assert escape("[a]&b,c") == "&#91;a&#93;&amp;b,c"

    def test_param(self):
        assert escape("a,b", in_param=True) == "a&#44;b"

    def test_unescape(self):
        assert unescape("&#91;a&#93;&amp;b&#44;c") == "[a]&b,c"

    def test_no_double_unescape(self):
        assert unescape(escape("&#91;")) == "&#91;"


class TestParseAll:

    def test_plain_text(self):
        assert parse_all("hello") == ["hello"]

    def test_empty(self):
        assert parse_all("") == []

    def test_mixed(self):
        nodes = parse_all("看[CQ:image,url=http://a/1.png]图")
        assert nodes == [
            "看",
            CQSegment("image", {"url": "http://a/1.png"}),
            "图",
        ]

    def test_adjacent_segments(self):
        nodes = parse_all("[CQ:image,file=a][CQ:face,id=1]")
        assert [n.type for n in nodes] == ["image", "face"]

    def test_param_unescaped(self):
        (node,) = parse_all("[CQ:image,url=http://a/?x=1&#44;2]")
        assert node.data["url"] == "http://a/?x=1,2"

    def test_text_unescaped(self):
        assert parse_all("&#91;not code&#93;") == ["[not code]"]

    def test_segment_str(self):
        segment = CQSegment("image", {"file": "a,b"})
        assert str(segment) == "[CQ:image,file=a&#44;b]"
        assert parse_all(str(segment)) == [segment]
