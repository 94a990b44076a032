from datetime import datetime

from services import rag


class FakeGroqClient:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def chat(self, messages, temperature=0.7, max_tokens=2000):
        self.calls.append(messages)
        return self.reply


def test_system_prompt_includes_disease_focus():
    prompt = rag.get_system_prompt("dementia")
    assert prompt.startswith("You are HealthAI Guardian")
    assert "Stroop test" in prompt
    assert prompt.endswith("consult healthcare professionals for serious concerns.")
    assert "Focus on" not in rag.get_system_prompt(None)


def test_format_retrieved_docs():
    ts = datetime(2024, 3, 5, 12, 0)
    docs = [
        {"gameType": "attention_digitspan", "accuracy": 0.5, "timestamp": ts},
        {"gameType": "executive_stroop", "accuracy": 0, "timestamp": ts},
        {"questionText": "How are you?", "answer": "x" * 150, "timestamp": ts},
        {"ml_output": {"heart_disease_risk": 0.2, "diabetes_risk": 0.4}, "timestamp": ts},
        {"baseImageUrl": "/img.jpg"},
    ]
    lines = rag.format_retrieved_docs(docs).split("\n")
    assert lines[0] == "[1] Game: attention_digitspan, Accuracy: 0.5, Date: 3/5/2024"
    assert lines[1] == "[2] Game: executive_stroop, Accuracy: N/A, Date: 3/5/2024"
    assert lines[2] == f"[3] Question: How are you?, Answer: {'x' * 100}, Date: 3/5/2024"
    assert lines[3] == "[4] Health: Heart Risk 0.2, Diabetes Risk 0.4, Date: 3/5/2024"
    assert lines[4] == "[5] Data from Unknown date"


def test_format_no_docs():
    assert rag.format_retrieved_docs([]) == "No previous data available."


def test_rag_response_builds_messages():
    client = FakeGroqClient("answer")
    assert rag.generate_rag_response("Summarise", [], "stress", client=client) == "answer"
    system, user = client.calls[0]
    assert system["role"] == "system" and "stress indicators" in system["content"]
    assert user["content"] == "Summarise\n\nContext from previous sessions:\nNo previous data available."


def test_game_suggestions_deduplicated():
    client = FakeGroqClient("Try the Stroop task for executive function, and a memory word list game.")
    result = rag.generate_game_suggestions("u", [], {"alzheimers": 0.5, "dementia": 0.1}, client=client)
    assert result["suggestedGames"] == ["memory_wordlist", "executive_stroop"]
    assert result["priority"] == "medium"
    assert "alzheimers: 50.0%" in client.calls[0][1]["content"]


def test_game_suggestions_default():
    client = FakeGroqClient("Keep going.")
    result = rag.generate_game_suggestions("u", [], {"heart": 0.9}, client=client)
    assert result["suggestedGames"] == ["attention_digitspan"]
    assert result["priority"] == "high"
    assert result["reasoning"] == "Keep going."


def test_priority_low_without_risks():
    assert rag.priority_for({}) == "low"


def test_parse_questions_strips_markers():
    text = "Here are some questions:\n1. How did you sleep?\n2) Do you feel rested?\n- What worries you?\n• Any headaches?\nNot a question."
    assert rag.parse_questions(text) == [
        "How did you sleep?",
        "Do you feel rested?",
        "What worries you?",
        "Any headaches?",
    ]


def test_multi_digit_numbering_is_stripped():
    assert rag.parse_questions("12. Is this fine?") == ["Is this fine?"]


def test_dynamic_questions_limit_and_fallback():
    client = FakeGroqClient("1. A?\n2. B?\n3. C?\n4. D?")
    assert rag.generate_dynamic_questions("u", [], count=2, client=client) == ["A?", "B?"]

    fallback = rag.generate_dynamic_questions("u", [], client=FakeGroqClient("nothing useful"))
    assert fallback == rag.FALLBACK_QUESTIONS


def test_format_non_string_answer():
    doc = {"questionText": "Stress level?", "answer": 4, "timestamp": datetime(2024, 3, 5)}
    assert rag.format_retrieved_docs([doc]) == "[1] Question: Stress level?, Answer: 4, Date: 3/5/2024"
