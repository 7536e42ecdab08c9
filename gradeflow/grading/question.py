from __future__ import annotations

import decimal
import textwrap
import typing as t

from gradeflow.model import Response, ResponseFile

AnswerFormat = t.Literal["text", "files", "either"]


class ProgrammingTaskQuestion(object):
    """A programming task answered with inline source, uploaded files, or both.

    The inline answer lives under the "answer" key of the response data;
    uploaded files travel alongside the response. Grader output merged into
    the response (e.g. "feedback") is included in the summary.
    """

    def __init__(
        self,
        *,
        min_fraction: decimal.Decimal = decimal.Decimal(0),
        answer_format: AnswerFormat = "either",
        summary_width: int = 80,
    ):
        self._min_fraction = min_fraction
        self.answer_format = answer_format
        self.summary_width = summary_width

    @property
    def min_fraction(self) -> decimal.Decimal:
        return self._min_fraction

    def is_complete(self, response: Response, files: t.Sequence[ResponseFile]) -> bool:
        has_text = bool(str(response.get("answer") or "").strip())
        has_files = any(f.content for f in files)
        match self.answer_format:
            case "text":
                return has_text
            case "files":
                return has_files
            case _:
                return has_text or has_files

    def is_gradable(self, response: Response, files: t.Sequence[ResponseFile]) -> bool:
        return self.is_complete(response, files)

    def is_same_response(
        self,
        prev: Response,
        prev_files: t.Sequence[ResponseFile],
        new: Response,
        new_files: t.Sequence[ResponseFile],
    ) -> bool:
        if (prev.get("answer") or "") != (new.get("answer") or ""):
            return False
        return _fingerprint(prev_files) == _fingerprint(new_files)

    def summarize(self, response: Response) -> str:
        parts: list[str] = []
        if answer := str(response.get("answer") or "").strip():
            parts.append(textwrap.shorten(answer, width=self.summary_width, placeholder=" ..."))
        if feedback := str(response.get("feedback") or "").strip():
            parts.append("feedback: " + textwrap.shorten(feedback, width=self.summary_width, placeholder=" ..."))
        return "; ".join(parts)


def _fingerprint(files: t.Sequence[ResponseFile]) -> set[tuple[str, bytes]]:
    return {(f.filename, f.content) for f in files}
