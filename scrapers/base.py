"""
Base Adapter
Abstract base for every provider adapter, plus the resilient wrapper that
turns any adapter failure into an empty, labelled outcome.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple
import asyncio
import logging

import httpx

from config import ProviderCredentials
from core import SourceResult, TargetProfile
from utils.exceptions import ProviderError


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ReputationScan/1.0 (reputation monitoring)"


@dataclass
class AdapterOutcome:
    """Settled result of one adapter call."""
    adapter: str
    results: List[SourceResult] = field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False
    duration_ms: int = 0

    @property
    def attempted(self) -> bool:
        return not self.skipped


async def resilient(
    name: str,
    call: Callable[[], Awaitable[List[SourceResult]]],
    *,
    timeout_sec: float,
) -> AdapterOutcome:
    """
    Run one adapter call with a hard deadline and full exception containment.

    A timeout is treated exactly like any other failure: empty results and an
    error string. Never raises (cancellation of the caller still propagates).
    """
    loop = asyncio.get_running_loop()
    started = loop.time()

    def _elapsed() -> int:
        return int((loop.time() - started) * 1000)

    try:
        results = await asyncio.wait_for(call(), timeout=float(timeout_sec))
    except asyncio.TimeoutError:
        message = f"{name}: timed out after {timeout_sec:g}s"
        logger.warning(f"[{name}] {message}")
        return AdapterOutcome(adapter=name, error=message, duration_ms=_elapsed())
    except ProviderError as e:
        message = f"{name}: {e.message}"
        logger.warning(f"[{name}] request rejected: {e}")
        return AdapterOutcome(adapter=name, error=message, duration_ms=_elapsed())
    except httpx.HTTPError as e:
        message = f"{name}: {e.__class__.__name__}: {e}"
        logger.warning(f"[{name}] network error: {e}")
        return AdapterOutcome(adapter=name, error=message, duration_ms=_elapsed())
    except (ValueError, KeyError, TypeError) as e:
        message = f"{name}: malformed response: {e}"
        logger.warning(f"[{name}] parse error: {e}")
        return AdapterOutcome(adapter=name, error=message, duration_ms=_elapsed())
    except Exception as e:
        message = f"{name}: {e}"
        logger.exception(f"[{name}] unexpected adapter failure")
        return AdapterOutcome(adapter=name, error=message, duration_ms=_elapsed())

    return AdapterOutcome(adapter=name, results=list(results or []), duration_ms=_elapsed())


class BaseAdapter(ABC):
    """
    Provider adapter base.

    Subclasses set the class attributes and implement ``fetch``; callers use
    ``run``, which applies the credential check, deadline and containment.
    """

    name: str = "base"
    category: str = "search"
    timeout_sec: float = 10.0
    # Credential attribute names on ProviderCredentials this adapter needs
    requires: Tuple[str, ...] = ()
    # Return labelled synthetic data instead of skipping when unconfigured
    placeholder_when_unconfigured: bool = False
    # Deadline for each sub-query run through _settle; None leaves only the adapter deadline
    subquery_timeout_sec: Optional[float] = None

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.credentials = credentials or ProviderCredentials()
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    @abstractmethod
    async def fetch(self, profile: TargetProfile) -> List[SourceResult]:
        """
        Query the provider for the target.

        May raise; ``run`` contains every failure.
        """
        pass

    def is_configured(self) -> bool:
        return self.credentials.has(*self.requires)

    def placeholder_results(self, profile: TargetProfile) -> List[SourceResult]:
        """Synthetic development data; override where placeholder mode is enabled."""
        return []

    async def run(self, profile: TargetProfile) -> AdapterOutcome:
        """Resilient entrypoint used by source modules. Never raises."""
        if not self.is_configured():
            if self.placeholder_when_unconfigured:
                logger.warning(
                    f"[{self.name}] credentials missing ({', '.join(self.credentials.missing(self.requires))}) "
                    "- returning placeholder results"
                )
                return AdapterOutcome(adapter=self.name, results=self.placeholder_results(profile))
            logger.debug(f"[{self.name}] not configured, skipped")
            return AdapterOutcome(adapter=self.name, skipped=True)

        outcome = await resilient(self.name, lambda: self.fetch(profile), timeout_sec=self.timeout_sec)
        if outcome.error is None:
            self._log_search(profile.name, len(outcome.results))
        return outcome

    async def _settle(
        self,
        calls: Sequence[Tuple[str, Awaitable[List[SourceResult]]]],
    ) -> List[SourceResult]:
        """
        Run labelled sub-queries concurrently and keep the batches that succeed.

        Failed sub-queries are logged and dropped. When every one fails the
        first error is raised so ``run`` records it against the adapter.
        """
        labels = [label for label, _ in calls]
        batches = await asyncio.gather(
            *(self._with_subquery_deadline(call) for _, call in calls),
            return_exceptions=True,
        )

        results: List[SourceResult] = []
        errors: List[Exception] = []
        for label, batch in zip(labels, batches):
            if isinstance(batch, Exception):
                logger.warning(f"[{self.name}] {label} failed: {batch!r}")
                errors.append(batch)
                continue
            if isinstance(batch, BaseException):
                raise batch
            results.extend(batch)

        if errors and len(errors) == len(batches):
            raise errors[0]
        return results

    async def _with_subquery_deadline(self, call: Awaitable[List[SourceResult]]) -> List[SourceResult]:
        if self.subquery_timeout_sec is None:
            return await call
        return await asyncio.wait_for(call, timeout=float(self.subquery_timeout_sec))

    def _get_client(self) -> httpx.AsyncClient:
        """Get or lazily create the HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0),
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_client = True
        return self._client

    async def _get_json(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        response = await self._get_client().get(url, params=params, headers=headers)
        self._check_response(response)
        return response.json()

    async def _post_json(
        self,
        url: str,
        *,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        response = await self._get_client().post(url, json=payload, headers=headers)
        self._check_response(response)
        return response.json()

    async def _get_text(self, url: str, *, headers: Optional[Dict[str, str]] = None) -> str:
        response = await self._get_client().get(url, headers=headers)
        self._check_response(response)
        return str(response.text or "")

    def _check_response(self, response: httpx.Response) -> None:
        if response.is_error:
            raise ProviderError(
                f"HTTP {response.status_code}",
                source=self.name,
                status_code=response.status_code,
                url=str(response.request.url),
            )

    async def close(self):
        """Release the HTTP client if this adapter created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _result(self, **fields: Any) -> SourceResult:
        """Build a SourceResult stamped with this adapter's source and category"""
        fields.setdefault("source", self.name)
        fields.setdefault("category", self.category)
        return SourceResult(**fields)

    def _log_search(self, query: str, count: int):
        logger.info(f"[{self.name}] '{query}' returned {count} results")

    def _log_error(self, message: str, error: Exception):
        logger.error(f"[{self.name}] {message}: {error}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, category={self.category!r})"
