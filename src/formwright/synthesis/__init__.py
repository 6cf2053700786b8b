"""Form synthesis: final form assembly and quiz answer options."""

from __future__ import annotations

from formwright.synthesis.form_synthesizer import FormSynthesizer, is_quiz_request
from formwright.synthesis.quiz_options import QuizOptionGenerator, QuizOptions

__all__ = ["FormSynthesizer", "QuizOptionGenerator", "QuizOptions", "is_quiz_request"]
