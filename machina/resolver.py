"""
Dependency Resolver.

Loads the dependency manifest of a machine definition through a module
context, guessing that context when the host does not name one.

Design Principle:
    An explicit context always wins. Guessing is a pluggable strategy
    (LikenessScorer by default) over an explicit candidate list, so the
    resolver itself stays deterministic for a fixed input.

Flow:
    1. Context given -> use it
    2. Else score every candidate with the scorer, keep the best
    3. For each manifest entry, ``context.require(name)``
    4. Failures are handed to ``on_error`` (normally ``Machine.error``)
       and stop resolution

Likeness scoring:
    The directory part of a candidate's id is split into segments, read
    right to left. Every segment matching the definition's hint adds
    ``1 / (position + 1)``, so matches closer to the file count more.
    The sum is scaled by ``100 / len(candidates)``.

    candidates: a/b/target/m.py, x/y/m.py, target/z/m.py   hint: "target"
    scores:     33.3             0.0       16.7
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import PurePath
from re import Pattern
from typing import TYPE_CHECKING, Any, Protocol

from .errors import DependencyContextUnresolved, DependencyLoadFailed

if TYPE_CHECKING:
    from .definition import MachineDefinition
    from .modules import ModuleContext

logger = logging.getLogger(__name__)

Hint = str | Pattern[str]


class ContextScorer(Protocol):
    """Protocol for strategies guessing a definition's module context."""

    def guess(
        self,
        candidates: Sequence[ModuleContext],
        hint: Hint,
    ) -> ModuleContext | None:
        """Return the most likely context, or None if nothing fits."""
        ...


class LikenessScorer:
    """
    Guess the owning module by how close to the leaf the hint appears.

    Args:
        min_score: Opt-in threshold a guess must score strictly above.
            None (the default) accepts the best candidate even when no
            segment matched; the first candidate seen wins ties.
    """

    def __init__(self, min_score: float | None = None):
        self._min_score = min_score

    @staticmethod
    def segments(candidate: ModuleContext) -> list[str]:
        """Directory segments of the candidate's id, leaf first."""
        return list(reversed(PurePath(candidate.id).parent.parts))

    @staticmethod
    def matches(segment: str, hint: Hint) -> bool:
        if isinstance(hint, Pattern):
            return hint.search(segment) is not None
        return hint in segment

    def score(self, candidate: ModuleContext, hint: Hint, total: int) -> float:
        """
        Likeness of ``candidate`` as a percentage-like score.

        Args:
            candidate: Module to score
            hint: Module-name hint of the definition
            total: Number of candidates being compared
        """
        rank = 0.0
        for position, segment in enumerate(self.segments(candidate)):
            if self.matches(segment, hint):
                rank += 1.0 / (position + 1)
        return rank * 100 * (1.0 / total)

    def guess(
        self,
        candidates: Sequence[ModuleContext],
        hint: Hint,
    ) -> ModuleContext | None:
        if not candidates:
            return None

        best: ModuleContext | None = None
        best_score = 0.0
        total = len(candidates)

        for candidate in candidates:
            score = self.score(candidate, hint, total)
            logger.debug(f"[resolver] {score:.1f}% likely that '{candidate.id}' owns '{hint}'")
            # Strict comparison: first-seen wins ties
            if best is None or score > best_score:
                best, best_score = candidate, score

        if self._min_score is not None and best_score <= self._min_score:
            logger.debug(
                f"[resolver] Best score {best_score:.1f} does not exceed "
                f"threshold {self._min_score}"
            )
            return None
        return best


class DependencyResolver:
    """
    Resolves a definition's dependency manifest.

    Example:
        resolver = DependencyResolver()
        deps = resolver.resolve(
            definition,
            candidates=graph.candidates(),
            on_error=machine.error,
        )
    """

    def __init__(self, scorer: ContextScorer | None = None):
        self._scorer = scorer if scorer is not None else LikenessScorer()

    @property
    def scorer(self) -> ContextScorer:
        return self._scorer

    def resolve_context(
        self,
        definition: MachineDefinition,
        candidates: Sequence[ModuleContext] = (),
        context: ModuleContext | None = None,
    ) -> ModuleContext | None:
        """Return the explicit context, or the scorer's best guess."""
        if context is not None:
            return context

        guessed = self._scorer.guess(candidates, definition.hint)
        if guessed is None:
            logger.debug(
                f"[resolver] No context found for '{definition.id}' "
                f"among {len(candidates)} candidate(s)"
            )
        else:
            logger.debug(f"[resolver] Guessed context '{guessed.name}' for '{definition.id}'")
        return guessed

    def resolve(
        self,
        definition: MachineDefinition,
        *,
        candidates: Sequence[ModuleContext] | Callable[[], Sequence[ModuleContext]] = (),
        context: ModuleContext | None = None,
        on_error: Callable[..., Any],
    ) -> dict[str, Any]:
        """
        Load every dependency in the definition's manifest.

        Args:
            definition: Definition whose manifest is loaded
            candidates: Candidate contexts, or a callable returning them
                (only called when there is something to resolve)
            context: Explicit context, skips guessing
            on_error: Receives DependencyContextUnresolved/DependencyLoadFailed

        Returns:
            Dependency name -> loaded value, for the names resolved before
            any failure
        """
        resolved: dict[str, Any] = {}
        if not definition.dependencies:
            return resolved

        if callable(candidates):
            candidates = candidates()

        context = self.resolve_context(definition, candidates, context)

        for name in definition.dependencies:
            if context is None:
                on_error(DependencyContextUnresolved(definition.id))
                break

            try:
                resolved[name] = context.require(name)
            except Exception as e:
                error = DependencyLoadFailed(name, definition.id, context.name, e)
                error.__cause__ = e
                on_error(error)
                break

        logger.info(
            f"[resolver] Resolved {len(resolved)}/{len(definition.dependencies)} "
            f"dependencies for '{definition.id}'"
        )
        return resolved
