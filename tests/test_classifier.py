"""Tests for chat line classification."""

import pytest
from chatranslator.core.classifier import (
    classify,
    extract_sender_and_content,
    is_chinese_abbreviation,
    should_skip_translation,
)
from chatranslator.core.models import Ignored, PlayerUtterance


class TestFilters:
    def test_own_translation_output_is_ignored(self):
        assert isinstance(classify("<Alice> [译] hola"), Ignored)
        assert isinstance(classify("<Alice> [原文] hola"), Ignored)
        assert isinstance(classify("<Alice> [译文] hello"), Ignored)

    def test_command_is_ignored(self):
        assert isinstance(classify("/help"), Ignored)

    def test_command_inside_player_line_is_ignored(self):
        assert isinstance(classify("<Bob> /tp 0 64 0"), Ignored)

    @pytest.mark.parametrize(
        "line",
        [
            "[系统] Server restarting",
            "[Steve加入了游戏]",
            "[Steve离开了游戏]",
            "Steve joined the game",
            "[CHAT] Steve left the game",
        ],
    )
    def test_system_messages_are_ignored(self, line):
        assert isinstance(classify(line), Ignored)

    def test_empty_line_is_ignored(self):
        assert isinstance(classify(""), Ignored)
        assert isinstance(classify("   "), Ignored)


class TestExtraction:
    def test_plain_player_message(self):
        assert classify("<Bob> hello world") == PlayerUtterance(sender="Bob", content="hello world")

    def test_content_is_trimmed(self):
        assert classify("<Bob>   hello world   ") == PlayerUtterance(sender="Bob", content="hello world")

    def test_bracketed_prefix(self):
        assert classify("[CHAT] <Bob> bonjour") == PlayerUtterance(sender="Bob", content="bonjour")

    def test_other_tag_prefix(self):
        assert classify("[Team] <Bob> hola amigos") == PlayerUtterance(sender="Bob", content="hola amigos")

    def test_loose_extraction_takes_last_angle_group(self):
        result = classify("12:00 [Render/INFO]: <Guild> <Bob> guten tag")
        assert result == PlayerUtterance(sender="Bob", content="guten tag")

    def test_unattributed_best_effort(self):
        assert classify("good morning everyone") == PlayerUtterance(sender=None, content="good morning everyone")

    def test_unattributed_line_with_slash_is_ignored(self):
        assert isinstance(classify("see example.com/page"), Ignored)

    def test_unattributed_can_be_disabled(self):
        assert isinstance(classify("good morning", allow_unattributed=False), Ignored)

    def test_extract_returns_none_without_match(self):
        assert extract_sender_and_content("no brackets here") == (None, None)


class TestSelfAndLanguageSkip:
    def test_own_player_is_ignored(self):
        assert isinstance(classify("<Dave> test", self_name="Dave"), Ignored)

    def test_own_player_match_is_case_insensitive(self):
        assert isinstance(classify("<dave> test", self_name="DAVE"), Ignored)

    def test_other_player_is_kept(self):
        assert classify("<Eve> test", self_name="Dave") == PlayerUtterance(sender="Eve", content="test")

    def test_cjk_content_is_ignored(self):
        assert isinstance(classify("<Carol> 你好"), Ignored)
        assert isinstance(classify("<Carol> ok 好的"), Ignored)

    def test_abbreviation_is_ignored(self):
        assert isinstance(classify("<Carol> gg"), Ignored)
        assert isinstance(classify("<Carol> GG!!"), Ignored)
        assert isinstance(classify("<Carol> 233。"), Ignored)

    def test_abbreviation_inside_sentence_is_translated(self):
        assert classify("<Carol> gg well played") == PlayerUtterance(sender="Carol", content="gg well played")

    @pytest.mark.parametrize("text", ["nb", " xswl ", "fw?", "lz,"])
    def test_is_chinese_abbreviation(self, text):
        assert is_chinese_abbreviation(text)

    def test_should_skip_translation(self):
        assert should_skip_translation("")
        assert should_skip_translation("你好")
        assert should_skip_translation("gg")
        assert not should_skip_translation("hello")
