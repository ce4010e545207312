"""
Quiz catalog

Read-only lookup of quiz definitions by id. The engine only ever sees the
QuizCatalog interface, so built-in instruments and clinic-authored quizzes
fetched from the backend are interchangeable.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Union

import httpx

from ..config import config
from .definitions import builtin_definitions
from .exceptions import CatalogFetchError, IndexOutOfRange, UnknownQuiz
from .schema import QuizDefinition, QuizOption, QuizQuestion, ScoringBand, format_number
from .scoring import option_points, parse_label_points

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom_"

# Percent-of-max thresholds used when a custom quiz row omits them
DEFAULT_THRESHOLDS = {"mild_threshold": 25, "moderate_threshold": 50, "severe_threshold": 75}

CUSTOM_BAND_TEXT = {
    "normal": ("Minimal", "Your symptoms appear to be minimal. Continue monitoring your condition."),
    "mild": ("Mild", "Your symptoms indicate a mild condition. Consider monitoring or consulting with a healthcare provider."),
    "moderate": ("Moderate", "Your symptoms indicate a moderate condition. We recommend scheduling a consultation."),
    "severe": ("Severe", "Your symptoms indicate a severe condition. Please consult with a healthcare provider immediately."),
}


class QuizCatalog(ABC):
    """
    Abstract lookup of quiz definitions.

    Implementations must implement get_quiz() and quiz_ids().
    """

    @abstractmethod
    def get_quiz(self, quiz_id: str) -> QuizDefinition:
        """
        Look up a quiz.

        Raises:
            UnknownQuiz: If the id is not known. Not retryable.
        """
        pass

    @abstractmethod
    def quiz_ids(self) -> list[str]:
        """Ids of every quiz this catalog can serve without I/O."""
        pass

    def __contains__(self, quiz_id: str) -> bool:
        try:
            self.get_quiz(quiz_id)
        except UnknownQuiz:
            return False
        return True

    def list_question_options(
        self,
        quiz: Union[QuizDefinition, str],
        question_index: int,
    ) -> list[QuizOption]:
        """
        Options of one question, in answer-index order.

        Args:
            quiz: A definition or a quiz id
            question_index: 0-based question position

        Raises:
            UnknownQuiz: If given an unknown id
            IndexOutOfRange: If the question does not exist
        """
        if isinstance(quiz, str):
            quiz = self.get_quiz(quiz)
        if not 0 <= question_index < len(quiz.questions):
            raise IndexOutOfRange(
                f"{quiz.id} has no question {question_index} "
                f"(valid range 0-{len(quiz.questions) - 1})"
            )
        return list(quiz.questions[question_index].options)

    def definitions(self) -> list[QuizDefinition]:
        return [self.get_quiz(quiz_id) for quiz_id in self.quiz_ids()]


# =============================================================================
# DATA INTEGRITY
# =============================================================================

def achievable_range(quiz: QuizDefinition) -> tuple[float, float]:
    """Lowest and highest total a complete set of answers can produce."""
    low = high = 0
    for question in quiz.questions:
        points = [option_points(o, i) for i, o in enumerate(question.options)]
        if points:
            low += min(points)
            high += max(points)
    return low, high


def validate_definition(
    quiz: QuizDefinition,
    known_ids: Optional[Iterable[str]] = None,
) -> list[str]:
    """
    Check a definition for data-integrity problems.

    Problems are reported, not raised: legacy and clinic-authored data is
    allowed to load, and a score that truly falls outside every band still
    fails loudly at scoring time.

    Args:
        quiz: Definition to check
        known_ids: Ids triage branches may point at

    Returns:
        List of warning messages (empty if clean)
    """
    warnings = []

    if quiz.is_triage:
        if not quiz.branches:
            warnings.append(f"{quiz.id}: triage quiz has no branches")
        options = quiz.questions[0].options if quiz.questions else []
        if len(options) != len(quiz.branches):
            warnings.append(
                f"{quiz.id}: triage question has {len(options)} options for {len(quiz.branches)} branches"
            )
        if known_ids is not None:
            known = set(known_ids)
            for branch in quiz.branches:
                if branch.target_quiz_id not in known:
                    warnings.append(f"{quiz.id}: branch targets unknown quiz {branch.target_quiz_id!r}")
        return warnings

    if not quiz.questions:
        warnings.append(f"{quiz.id}: quiz has no questions")

    for position, question in enumerate(quiz.questions):
        if not question.options:
            warnings.append(f"{quiz.id}: question {position} has no options")
            continue
        unvalued = [o for o in question.options if o.value is None]
        parsed = [o for o in unvalued if parse_label_points(o.label) is not None]
        if parsed and len(parsed) != len(unvalued):
            warnings.append(
                f"{quiz.id}: question {position} has point values on only "
                f"{len(parsed)} of {len(unvalued)} option labels"
            )

    if not quiz.bands:
        warnings.append(f"{quiz.id}: quiz has no severity bands")
        return warnings

    for previous, band in zip(quiz.bands, quiz.bands[1:]):
        if band.min_score <= previous.min_score:
            warnings.append(f"{quiz.id}: band {band.key!r} is not above band {previous.key!r}")
        elif previous.max_score is None or band.min_score <= previous.max_score:
            warnings.append(
                f"{quiz.id}: band {band.key!r} ({band.range_text}) overlaps "
                f"band {previous.key!r} ({previous.range_text})"
            )
        elif band.min_score - previous.max_score > 1:
            warnings.append(
                f"{quiz.id}: gap between band {previous.key!r} ({previous.range_text}) "
                f"and band {band.key!r} ({band.range_text})"
            )

    low, high = achievable_range(quiz)
    first, last = quiz.bands[0], quiz.bands[-1]

    if first.min_score > 0:
        warnings.append(f"{quiz.id}: lowest band starts at {format_number(first.min_score)}, not 0")
    if last.max_score is not None and last.max_score < quiz.max_score:
        warnings.append(
            f"{quiz.id}: highest band ends at {format_number(last.max_score)}, "
            f"below max score {format_number(quiz.max_score)}"
        )
    if quiz.questions and high != quiz.max_score:
        warnings.append(
            f"{quiz.id}: highest achievable score is {format_number(high)}, "
            f"documented max score is {format_number(quiz.max_score)}"
        )
    if quiz.questions and low < first.min_score:
        warnings.append(f"{quiz.id}: lowest achievable score {format_number(low)} is below every band")
    for band in quiz.bands:
        if band.min_score > max(high, quiz.max_score):
            warnings.append(
                f"{quiz.id}: band {band.key!r} ({band.range_text}) can never be reached"
            )

    return warnings


# =============================================================================
# STATIC CATALOG
# =============================================================================

class StaticCatalog(QuizCatalog):
    """
    In-memory catalog.

    Definitions can be registered at runtime; registered definitions are
    validated and any warnings logged, but never rejected.
    """

    def __init__(
        self,
        definitions: Iterable[QuizDefinition] = (),
        warn_on_load: Optional[bool] = None,
    ):
        """
        Initialize catalog.

        Args:
            definitions: Initial definitions
            warn_on_load: Log integrity warnings (defaults to config)
        """
        self._quizzes: dict[str, QuizDefinition] = {}
        self.warnings: dict[str, list[str]] = {}
        self._warn_on_load = config.catalog.warn_on_load if warn_on_load is None else warn_on_load

        for definition in definitions:
            self.register(definition)

    def register(self, definition: QuizDefinition, replace: bool = False) -> list[str]:
        """
        Add a definition.

        Args:
            definition: Definition to add
            replace: Allow replacing an existing definition with the same id

        Returns:
            Integrity warnings for the definition

        Raises:
            ValueError: If the id is taken and replace is False
        """
        if definition.id in self._quizzes and not replace:
            raise ValueError(f"Quiz {definition.id!r} is already registered")

        self._quizzes[definition.id] = definition
        warnings = validate_definition(definition)
        if warnings:
            self.warnings[definition.id] = warnings
            if self._warn_on_load:
                for warning in warnings:
                    logger.warning(f"Quiz data integrity: {warning}")
        else:
            self.warnings.pop(definition.id, None)
        return warnings

    def get_quiz(self, quiz_id: str) -> QuizDefinition:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None and not quiz_id.startswith(CUSTOM_PREFIX):
            # Share links use lower-case ids ("/embed/nose")
            quiz = self._quizzes.get(quiz_id.upper())
        if quiz is None:
            raise UnknownQuiz(quiz_id)
        return quiz

    def quiz_ids(self) -> list[str]:
        return list(self._quizzes)

    def __len__(self) -> int:
        return len(self._quizzes)

    def check_branches(self) -> list[str]:
        """Integrity warnings for triage branches against this catalog's ids."""
        warnings = []
        for quiz in self._quizzes.values():
            if quiz.is_triage:
                warnings.extend(validate_definition(quiz, known_ids=self._quizzes))
        return warnings


def default_catalog(warn_on_load: Optional[bool] = None) -> StaticCatalog:
    """Catalog of the built-in instruments."""
    return StaticCatalog(builtin_definitions(), warn_on_load=warn_on_load)


# =============================================================================
# CLINIC-AUTHORED QUIZZES
# =============================================================================

def _custom_band(key: str, start: float, end: Optional[float]) -> ScoringBand:
    label, message = CUSTOM_BAND_TEXT[key]
    span = f"{format_number(round(start, 2))}+"
    if end is not None:
        span = f"{format_number(round(start, 2))}-{format_number(round(end, 2))}"
    return ScoringBand(
        key=key,
        label=label,
        min_score=start,
        max_score=end,
        interpretation=f"{label} ({span}): {message}",
    )


def custom_bands(max_score: float, scoring: dict) -> list[ScoringBand]:
    """
    Severity bands for a clinic-authored quiz.

    Thresholds are percentages of max_score; a score at or above a threshold
    falls in that band, fractional scores included. The severe band has no
    upper bound. A band shadowed by a higher band's threshold is dropped, and
    without a positive max_score every score is normal.
    """
    if max_score <= 0:
        return [_custom_band("normal", 0, None)]

    thresholds = {k: float(scoring.get(k, DEFAULT_THRESHOLDS[k])) for k in DEFAULT_THRESHOLDS}
    starts = [
        ("normal", 0),
        ("mild", max_score * thresholds["mild_threshold"] / 100),
        ("moderate", max_score * thresholds["moderate_threshold"] / 100),
        ("severe", max_score * thresholds["severe_threshold"] / 100),
    ]

    # Highest band first, each capped just below the next kept band's start
    bands = []
    ceiling = None
    for key, start in reversed(starts):
        if ceiling is not None and start >= ceiling:
            continue
        end = None if ceiling is None else max(start, ceiling - 1)
        bands.insert(0, _custom_band(key, start, end))
        ceiling = start
    return bands


def definition_from_custom_row(row: dict) -> QuizDefinition:
    """
    Convert a custom quiz table row into a standard definition.

    Args:
        row: Row with id, title, description, max_score, questions, scoring

    Returns:
        QuizDefinition with id "custom_<row id>"
    """
    try:
        questions = [QuizQuestion.from_dict(q) for q in row.get("questions") or []]
        max_score = row.get("max_score")
        if max_score is None:
            max_score = sum(
                max((option_points(o, i) for i, o in enumerate(q.options)), default=0)
                for q in questions
            )
        scoring = row.get("scoring") or {}
        return QuizDefinition(
            id=f"{CUSTOM_PREFIX}{row['id']}",
            title=row.get("title", ""),
            description=row.get("description", ""),
            max_score=max_score,
            questions=questions,
            bands=custom_bands(max_score, scoring),
            is_custom=True,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogFetchError(f"Malformed custom quiz row {row.get('id')!r}: {e}")


class RemoteCatalog(QuizCatalog):
    """
    Fetch-backed catalog for clinic-authored quizzes.

    fetch_quiz()/prefetch() load rows from the backend's custom quiz table
    and cache them; get_quiz() is synchronous and serves the cache first,
    then the base catalog. Reads:
    1. Constructor arguments
    2. SUPABASE_URL / SUPABASE_ANON_KEY via config
    """

    def __init__(
        self,
        base: Optional[QuizCatalog] = None,
        *,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        table: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize remote catalog.

        Args:
            base: Catalog consulted after the cache (defaults to built-ins)
            url: Backend base URL
            api_key: Backend anon key
            table: Custom quiz table name
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self.base = base if base is not None else default_catalog()
        self._url = (url or config.supabase.url).rstrip("/")
        self._api_key = api_key or config.supabase.anon_key
        self._table = table or config.catalog.custom_quiz_table
        self._timeout = timeout or config.supabase.timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._cache = StaticCatalog()

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            if not self._url or not self._api_key:
                raise CatalogFetchError(
                    "No backend configured. Set SUPABASE_URL and SUPABASE_ANON_KEY or pass url/api_key."
                )
            self._client = httpx.AsyncClient(
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def fetch_quiz(self, quiz_id: str) -> QuizDefinition:
        """
        Fetch one custom quiz and cache it.

        Args:
            quiz_id: Row id, with or without the "custom_" prefix

        Returns:
            The cached definition

        Raises:
            UnknownQuiz: If no active row has that id
            CatalogFetchError: On transport or HTTP errors
        """
        row_id = quiz_id.removeprefix(CUSTOM_PREFIX)
        client = self._get_client()

        try:
            response = await client.get(
                f"{self._url}/rest/v1/{self._table}",
                params={"id": f"eq.{row_id}", "select": "*"},
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Custom quiz fetch failed for {row_id}: HTTP {e.response.status_code}")
            raise CatalogFetchError(f"Custom quiz fetch failed: HTTP {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Custom quiz fetch failed for {row_id}: {e}")
            raise CatalogFetchError(f"Custom quiz fetch failed: {e}")

        if not isinstance(rows, list):
            raise CatalogFetchError(f"Unexpected response for custom quiz {row_id}: {rows!r}")

        active = [r for r in rows if r.get("is_active") is not False]
        if not active:
            raise UnknownQuiz(f"{CUSTOM_PREFIX}{row_id}")

        definition = definition_from_custom_row(active[0])
        self._cache.register(definition, replace=True)
        logger.debug(f"Cached custom quiz {definition.id} ({len(definition.questions)} questions)")
        return definition

    async def prefetch(self, quiz_ids: Iterable[str]) -> list[QuizDefinition]:
        """Fetch several custom quizzes concurrently."""
        return list(await asyncio.gather(*[self.fetch_quiz(q) for q in quiz_ids]))

    def get_quiz(self, quiz_id: str) -> QuizDefinition:
        if quiz_id in self._cache:
            return self._cache.get_quiz(quiz_id)
        return self.base.get_quiz(quiz_id)

    def quiz_ids(self) -> list[str]:
        return self.base.quiz_ids() + self._cache.quiz_ids()

    @property
    def warnings(self) -> dict[str, list[str]]:
        return self._cache.warnings

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RemoteCatalog":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
