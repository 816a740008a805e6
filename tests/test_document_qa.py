import asyncio

from chalo_ai.llm import DocumentQA, LLMError, fallback_answer


class StubLLM:
    provider = "Stub"
    model = "stub"

    def __init__(self, answer="", error=None):
        self.answer = answer
        self.error = error
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.answer


def _qa(tmp_path, llm=None):
    (tmp_path / "cancellation.txt").write_text(
        "Cancellation Policy\nMore than 48 hours before departure: full refund minus a $25 processing fee.",
        encoding="utf-8",
    )
    (tmp_path / "privacy.md").write_text(
        "Privacy Policy\nWe never sell your personal information.", encoding="utf-8"
    )
    qa = DocumentQA(str(tmp_path), llm=llm)
    qa.load()
    return qa


def test_loads_text_documents(tmp_path):
    qa = _qa(tmp_path)
    assert {chunk.metadata["source"] for chunk in qa.chunks} == {"cancellation.txt", "privacy.md"}


def test_default_document_when_nothing_loads(tmp_path):
    qa = DocumentQA(str(tmp_path))
    assert qa.load() == 1
    assert qa.chunks[0].metadata["source"] == "default"


def test_retrieve_ranks_matching_chunk_first(tmp_path):
    qa = _qa(tmp_path)
    docs = qa.retrieve("refund processing fee")
    assert docs[0].metadata["source"] == "cancellation.txt"


def test_prompt_contains_context_and_question(tmp_path):
    llm = StubLLM(answer="  You get a full refund.  ")
    qa = _qa(tmp_path, llm)

    answer = asyncio.run(qa.answer("How do refunds work?"))
    assert answer == "You get a full refund."
    assert "How do refunds work?" in llm.prompts[0]
    assert "48 hours" in llm.prompts[0]


def test_llm_error_uses_fallback(tmp_path):
    qa = _qa(tmp_path, StubLLM(error=LLMError("offline")))
    answer = asyncio.run(qa.answer("can I cancel my ticket?"))
    assert answer == fallback_answer("can I cancel my ticket?")
    assert "48 hours" in answer


def test_no_llm_uses_fallback(tmp_path):
    qa = _qa(tmp_path)
    assert asyncio.run(qa.answer("anything")) == fallback_answer("anything")
