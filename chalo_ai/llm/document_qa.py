# llm/document_qa.py
"""
Document QA for support questions.
Loads the policy documents, finds the chunks that best match a question by
keyword scoring, and asks the LLM to answer from them.

LLM Provider:
- If OPENAI_API_KEY is set: use OpenAI
- If no OPENAI_API_KEY: use Ollama
"""

import os
import re
from typing import List, Optional, Dict, Any

import httpx
from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter
from loguru import logger
from openai import AsyncOpenAI, OpenAIError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .prompts import QA_PROMPT, SYSTEM_PROMPT, NO_CONTEXT


DOCUMENTS = [
    ("privacy", "privacy"),
    ("booking", "booking"),
    ("chaloindia", "chaloindia"),
    ("cancellation", "cancellation"),
    ("terms", "terms"),
]
DOCUMENT_EXTENSIONS = (".pdf", ".txt", ".md")

DEFAULT_DOCUMENT = (
    "Chalo India is a flight booking service between India and Australia. "
    "We offer flights between major cities in India and Australia. For booking, "
    "cancellation, privacy, and terms information, please refer to our documentation."
)

TOP_K = 4
FALLBACK_K = 2


class LLMError(Exception):
    """The configured LLM provider did not return an answer"""


class LLMClient:
    """Thin wrapper over OpenAI or a local Ollama server"""

    def __init__(self, settings):
        self.settings = settings
        self.openai_client: Optional[AsyncOpenAI] = None
        if settings.use_openai:
            self.openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

    @property
    def provider(self) -> str:
        return "OpenAI" if self.openai_client else "Ollama"

    @property
    def model(self) -> str:
        return self.settings.OPENAI_MODEL if self.openai_client else self.settings.OLLAMA_MODEL

    async def complete(self, prompt: str) -> str:
        if self.openai_client:
            return await self._call_openai(prompt)
        return await self._call_ollama(prompt)

    async def _call_openai(self, prompt: str) -> str:
        try:
            response = await self.openai_client.chat.completions.create(
                model=self.settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=500,
                temperature=self.settings.LLM_TEMPERATURE,
                timeout=self.settings.LLM_TIMEOUT,
            )
        except OpenAIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e
        return response.choices[0].message.content or ""

    async def _call_ollama(self, prompt: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.settings.LLM_TIMEOUT) as client:
                response = await client.post(
                    f"{self.settings.OLLAMA_BASE_URL}/api/generate",
                    json={
                        "model": self.settings.OLLAMA_MODEL,
                        "prompt": f"{SYSTEM_PROMPT}\n\n{prompt}",
                        "stream": False,
                        "options": {
                            "temperature": self.settings.LLM_TEMPERATURE,
                            "num_predict": 500
                        }
                    }
                )
        except httpx.HTTPError as e:
            raise LLMError(f"Cannot reach Ollama at {self.settings.OLLAMA_BASE_URL}: {e}") from e

        if response.status_code != 200:
            raise LLMError(f"Ollama error: {response.status_code}")
        return response.json().get("response", "")


def extract_text(path: str) -> str:
    """Read plain text out of a PDF or text document"""
    if path.lower().endswith(".pdf"):
        reader = PdfReader(path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def fallback_answer(question: str) -> str:
    """Canned answer used when the LLM cannot be reached"""
    lower = question.lower()

    if "who are you" in lower or "what are you" in lower:
        return (
            "I'm the Chalo India chatbot! I can help with flight booking information, "
            "cancellation policies, privacy policy, terms & conditions, and general inquiries."
        )
    if "chalo india" in lower or ("about" in lower and "chalo" in lower):
        return (
            "Chalo India is a premier flight booking service specializing in flights between "
            "India and Australia. You can ask me about booking procedures, cancellation policies, "
            "privacy policy, or terms & conditions!"
        )
    if "cancel" in lower or "refund" in lower:
        return (
            "For cancellation and refund information, please contact our support team at "
            "support@chaloindia.com or check our cancellation policy. Generally, cancellations "
            "made more than 48 hours before departure are eligible for a refund minus fees."
        )
    if "book" in lower or "flight" in lower or "ticket" in lower:
        return (
            'I can book a flight for you right here - just type "book flight". '
            "You'll need your name, email, mobile number, passport number, route, "
            "travel dates, number of passengers and travel class."
        )
    if "privacy" in lower or "data" in lower:
        return (
            "We collect personal information (name, email, phone), payment information, and "
            "travel preferences to process your bookings. We use SSL encryption to protect "
            "your data and do not sell your information to third parties."
        )
    if "term" in lower or "condition" in lower:
        return (
            "Our terms include: full payment required at booking, valid travel documents needed, "
            "baggage allowances vary by class, and we act as an intermediary between you and the airline."
        )
    if "australia" in lower:
        return (
            "Australia is one of our main destinations! We fly to Melbourne, Sydney, Adelaide, "
            "Brisbane, Perth, Canberra and more. Would you like to book a flight?"
        )
    if "india" in lower:
        return (
            "India is one of our main departure points! We fly from Delhi, Mumbai, Bangalore, "
            "Chennai, Kolkata, Hyderabad and more. Would you like to book a flight?"
        )
    return (
        "I'm here to help with Chalo India flight booking questions! You can ask me about "
        "flight booking, cancellation policies and refunds, privacy, terms and conditions, "
        "or our special deals. For immediate assistance, contact support@chaloindia.com"
    )


class DocumentQA:
    """
    Keyword retrieval over document chunks plus one LLM call.
    """

    def __init__(self, documents_dir: str, llm: Optional[LLMClient] = None,
                 chunk_size: int = 1000, chunk_overlap: int = 200):
        self.documents_dir = documents_dir
        self.llm = llm
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=["\n\n", "\n", ". ", " ", ""]
        )
        self.chunks: List[Document] = []

    def _find_file(self, stem: str) -> Optional[str]:
        for ext in DOCUMENT_EXTENSIONS:
            path = os.path.join(self.documents_dir, stem + ext)
            if os.path.exists(path):
                return path
        return None

    def load(self) -> int:
        """(Re)load documents and split them into chunks"""
        documents = []
        for key, stem in DOCUMENTS:
            path = self._find_file(stem)
            if not path:
                logger.warning(f"Document {stem} not found in {self.documents_dir}")
                continue
            try:
                text = extract_text(path)
            except (OSError, PdfReadError, UnicodeDecodeError) as e:
                logger.error(f"Failed to load {path}: {e}")
                continue
            if not text.strip():
                logger.warning(f"{os.path.basename(path)} is empty or could not be read")
                continue

            documents.append(Document(
                page_content=text,
                metadata={
                    "source": os.path.basename(path),
                    "type": key,
                    "title": stem.title()
                }
            ))
            logger.info(f"Loaded {os.path.basename(path)} ({len(text)} characters)")

        if not documents:
            logger.warning("No documents loaded. Chatbot will work with limited knowledge.")
            documents.append(Document(
                page_content=DEFAULT_DOCUMENT,
                metadata={"source": "default", "type": "general", "title": "Chalo India"}
            ))

        self.chunks = self.splitter.split_documents(documents)
        logger.info(f"Created {len(self.chunks)} document chunks")
        return len(self.chunks)

    def score(self, chunk: Document, query: str) -> int:
        query_lower = query.lower()
        content = chunk.page_content.lower()
        score = 0

        if query_lower in content:
            score += 10

        for word in (w for w in query_lower.split() if len(w) > 2):
            score += 2 * content.count(word)
            if re.search(rf"(^|\s){re.escape(word)}\s", content):
                score += 1

        title = chunk.metadata.get("title", "").lower()
        if title and query_lower in title:
            score += 5
        return score

    def retrieve(self, query: str) -> List[Document]:
        """Top chunks for a query, or the first few when nothing matches"""
        scored = [(self.score(chunk, query), chunk) for chunk in self.chunks]
        relevant = [chunk for score, chunk in sorted(scored, key=lambda s: s[0], reverse=True) if score > 0]
        return relevant[:TOP_K] if relevant else self.chunks[:FALLBACK_K]

    @staticmethod
    def format_context(docs: List[Document]) -> str:
        if not docs:
            return NO_CONTEXT
        return "\n\n---\n\n".join(
            f"[Document {i + 1} - {doc.metadata.get('title') or doc.metadata.get('source')}]\n{doc.page_content}"
            for i, doc in enumerate(docs)
        )

    def build_prompt(self, question: str) -> str:
        context = self.format_context(self.retrieve(question))
        return QA_PROMPT.format(context=context, question=question)

    async def answer(self, question: str) -> str:
        if self.llm is None:
            return fallback_answer(question)

        prompt = self.build_prompt(question)
        try:
            answer = await self.llm.complete(prompt)
        except LLMError as e:
            logger.error(f"LLM error, using fallback answer: {e}")
            return fallback_answer(question)

        return answer.strip() or fallback_answer(question)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "chunks_loaded": len(self.chunks),
            "llm_provider": self.llm.provider if self.llm else None,
        }
