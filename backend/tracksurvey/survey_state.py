# tracksurvey/survey_state.py
"""
Participant-side survey progression.

One SurveyState per participant session: which track is on screen, the
answers given so far, and whether a submission is in flight. Nothing is
persisted until the final submit.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Union

from tracksurvey.client import SubmissionError
from tracksurvey.services.catalog import Track

logger = logging.getLogger(__name__)

Answer = Union[str, int, float]
Responses = Dict[int, Dict[str, Answer]]

INCOMPLETE_MESSAGE = (
    "Please answer every question for every track before submitting.\n"
    "Moving to the first unfinished track."
)
CONFIRM_MESSAGE = "Submit the survey? Answers cannot be changed afterwards."

PLAY_RETRY_DELAY = 0.5


class NextOutcome(str, Enum):
    ADVANCED = "advanced"
    REDIRECTED = "redirected"        # last track, survey incomplete
    CANCELLED = "cancelled"          # participant declined the confirmation
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"
    IGNORED = "ignored"              # a submission is already in flight


@dataclass
class Playback:
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0

    def reset(self) -> None:
        self.is_playing = False
        self.current_time = 0.0
        self.duration = 0.0


def is_answered(question_type: str, value: Any) -> bool:
    if question_type == "likert":
        return (isinstance(value, (int, float))
                and not isinstance(value, bool)
                and math.isfinite(value))
    if question_type == "text":
        return isinstance(value, str) and bool(value.strip())
    return False


class SurveyState:
    """
    submit:  sends the answer set; raises SubmissionError on failure
    notify:  shows a message to the participant
    confirm: asks a yes/no question, True to proceed
    """

    def __init__(self,
                 tracks: Sequence[Track],
                 submit: Callable[[Responses], Any],
                 notify: Optional[Callable[[str], None]] = None,
                 confirm: Optional[Callable[[str], bool]] = None):
        if not tracks:
            raise ValueError("a survey needs at least one track")
        self.tracks = list(tracks)
        self._submit = submit
        self._notify = notify or (lambda msg: logger.info("notify: %s", msg))
        self._confirm = confirm or (lambda msg: True)

        self.current_track_index = 0
        self.responses: Responses = {}
        self.is_submitting = False
        self.playback = Playback()

    # ---------- Derived state ----------

    @property
    def current_track(self) -> Track:
        return self.tracks[self.current_track_index]

    @property
    def is_first_track(self) -> bool:
        return self.current_track_index == 0

    @property
    def is_last_track(self) -> bool:
        return self.current_track_index == len(self.tracks) - 1

    @property
    def current_responses(self) -> Dict[str, Answer]:
        return self.responses.get(self.current_track.id, {})

    def is_track_complete(self, track: Track) -> bool:
        answers = self.responses.get(track.id, {})
        return all(is_answered(q.type, answers.get(q.id)) for q in track.questions)

    def is_all_complete(self) -> bool:
        return all(self.is_track_complete(t) for t in self.tracks)

    def first_incomplete_index(self) -> Optional[int]:
        for i, track in enumerate(self.tracks):
            if not self.is_track_complete(track):
                return i
        return None

    # ---------- Transitions ----------

    def _go_to(self, index: int) -> None:
        if index != self.current_track_index:
            self.playback.reset()
        self.current_track_index = index

    def answer(self, track_id: int, question_id: str, value: Answer) -> None:
        self.responses.setdefault(track_id, {})[question_id] = value

    def answer_current(self, question_id: str, value: Answer) -> None:
        self.answer(self.current_track.id, question_id, value)

    def prev(self) -> bool:
        if self.is_first_track:
            return False
        self.playback.is_playing = False
        self._go_to(self.current_track_index - 1)
        return True

    def next(self) -> NextOutcome:
        if self.is_submitting:
            return NextOutcome.IGNORED

        self.playback.is_playing = False
        if not self.is_last_track:
            self._go_to(self.current_track_index + 1)
            return NextOutcome.ADVANCED

        first_incomplete = self.first_incomplete_index()
        if first_incomplete is not None:
            self._notify(INCOMPLETE_MESSAGE)
            self._go_to(first_incomplete)
            return NextOutcome.REDIRECTED

        if not self._confirm(CONFIRM_MESSAGE):
            return NextOutcome.CANCELLED
        return self._submit_all()

    def _submit_all(self) -> NextOutcome:
        self.is_submitting = True
        try:
            self._submit(self.responses)
        except SubmissionError as e:
            logger.warning("Survey submission failed: %s", e)
            self._notify(str(e))
            return NextOutcome.SUBMIT_FAILED
        finally:
            self.is_submitting = False
        return NextOutcome.SUBMITTED

    # ---------- Playback ----------

    def toggle_play(self) -> None:
        self.playback.is_playing = not self.playback.is_playing

    def seek(self, seconds: float) -> None:
        self.playback.current_time = seconds

    def loaded_metadata(self, duration: float) -> None:
        self.playback.duration = duration

    def ended(self) -> None:
        self.playback.current_time = 0.0
        self.playback.is_playing = False

    def start_playback(self,
                       play: Callable[[], Any],
                       retry_delay: float = PLAY_RETRY_DELAY,
                       sleep: Callable[[float], None] = time.sleep) -> bool:
        """Start the audio; a failed start is retried once after ``retry_delay``."""
        try:
            play()
        except Exception as e:
            logger.warning("Play failed, retrying in %.1fs: %s", retry_delay, e)
            sleep(retry_delay)
            try:
                play()
            except Exception:
                logger.exception("Retry play failed for track %s", self.current_track.id)
                self.playback.is_playing = False
                return False
        self.playback.is_playing = True
        return True
