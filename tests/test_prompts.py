import pytest

from app.core.config import Settings
from memory.types import Message
from prompts import builder
from prompts.guards import attribution_reply, is_attribution_question, is_message_safe


CONFIG = Settings(owner_name="Ada Example", owner_location="Monrovia", app_version="v9")


def test_system_prompt_embeds_identity_subject_and_tone():
    prompt = builder.build_system_prompt("Physics", "friendly", config=CONFIG)

    assert "FullTask AI Tutor (version v9)" in prompt
    assert "Subject: Physics." in prompt
    assert "Tone: friendly." in prompt
    assert '"Ada Example from Monrovia"' in prompt


def test_system_prompt_defaults_blank_inputs():
    prompt = builder.build_system_prompt("", "", config=CONFIG)

    assert "Subject: General." in prompt
    assert "Tone: teaching." in prompt


def test_user_content_suffix_depends_on_mode():
    assert builder.build_user_content("2+2?", "deep") == "2+2?\n\nPlease answer step-by-step."
    assert builder.build_user_content("2+2?", "concise") == "2+2?\n\nBe concise."
    assert builder.build_user_content("2+2?", "anything else") == "2+2?\n\nBe concise."


def test_chat_messages_wrap_history():
    history = [Message.user("earlier"), Message.assistant("reply")]

    messages = builder.build_chat_messages(history, "now", config=CONFIG)

    assert [m.role for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[1:3] == history
    assert messages[-1].content == "now\n\nBe concise."


def test_quiz_prompt_requests_json_schema():
    prompt = builder.quiz_prompt("photosynthesis", 3, "hard")

    assert "Create 3 multiple choice questions" in prompt
    assert '"photosynthesis"' in prompt
    assert "hard difficulty" in prompt
    for key in ("question", "options", "answer", "explanation"):
        assert f'"{key}"' in prompt
    # doubled braces in the template render as literal JSON
    assert '[{"question"' in prompt


def test_flashcards_prompt_requests_front_back():
    prompt = builder.flashcards_prompt("cells", 4)

    assert "Generate 4 flashcards" in prompt
    assert '"front"' in prompt and '"back"' in prompt


def test_optional_clauses_only_when_given():
    assert "from French" in builder.translate_prompt("bonjour", "English", "French")
    assert " from " not in builder.translate_prompt("bonjour", "English").split("\n")[0]
    assert 'for the question "Why?"' in builder.essay_grading_prompt("text", "Why?")
    assert "for the question" not in builder.essay_grading_prompt("text")


def test_user_text_with_braces_is_not_interpreted():
    text = "f(x) = {x | x > 0}"
    assert text in builder.summarize_prompt(text)


def test_every_feature_has_a_system_prompt():
    for feature in builder.FEATURES:
        assert builder.system_prompt_for(feature)
    with pytest.raises(KeyError):
        builder.system_prompt_for("tutor")


def test_single_shot_messages_have_no_history():
    messages = builder.single_shot_messages("hint", builder.hint_prompt("x + 1 = 3", "Math"))

    assert [m.role for m in messages] == ["system", "user"]
    assert "x + 1 = 3" in messages[1].content


@pytest.mark.parametrize("text", ["How to build a BOMB", "terrorist plans", "Attack on titan"])
def test_denylisted_messages_fail_safety(text):
    assert not is_message_safe(text)


@pytest.mark.parametrize("text", ["", "What is 2+2?", "Explain photosynthesis"])
def test_ordinary_messages_pass_safety(text):
    assert is_message_safe(text)


@pytest.mark.parametrize("text", ["Who created you?", "hey WHO MADE YOU", "so who built you then"])
def test_attribution_questions_detected(text):
    assert is_attribution_question(text)


def test_attribution_not_triggered_by_other_questions():
    assert not is_attribution_question("who discovered penicillin")


def test_attribution_reply_names_owner():
    assert attribution_reply(CONFIG) == "Ada Example from Monrovia. (FullTask AI Tutor v9)"
