"""Task lifecycle predicate tests."""

from __future__ import annotations

import itertools

import pytest

from fusionbrain.models import (
    Availability,
    GenerationAccepted,
    GenerationRejected,
    Task,
)

STATUSES = ["INITIAL", "PROCESSING", "DONE", "FAIL", "SOMETHING_NEW"]
CENSORED = [None, True, False]
IMAGES = [None, ("aGVsbG8=",)]


class TestIsFinished:

    @pytest.mark.parametrize("status", ["DONE", "FAIL"])
    def test_terminal(self, status: str):
        assert Task(id="t", status=status).is_finished is True

    @pytest.mark.parametrize("status", ["INITIAL", "PROCESSING", "SOMETHING_NEW"])
    def test_not_terminal(self, status: str):
        assert Task(id="t", status=status).is_finished is False


class TestIsCensored:

    @pytest.mark.parametrize("status", ["INITIAL", "PROCESSING"])
    def test_unfinished_never_censored(self, status: str):
        """The flag is ignored until the job finishes."""
        assert Task(id="t", status=status, censored=True).is_censored is False

    def test_done_and_flagged(self):
        assert Task(id="t", status="DONE", censored=True).is_censored is True

    def test_fail_and_flagged(self):
        assert Task(id="t", status="FAIL", censored=True).is_censored is True

    @pytest.mark.parametrize("censored", [None, False])
    def test_done_without_flag(self, censored):
        assert Task(id="t", status="DONE", censored=censored).is_censored is False


class TestIsSuccess:

    def test_done_with_images(self):
        task = Task(id="t", status="DONE", images=("aGVsbG8=",), censored=False)
        assert task.is_success is True

    def test_done_with_images_and_unknown_censorship(self):
        assert Task(id="t", status="DONE", images=("aGVsbG8=",)).is_success is True

    def test_censored_placeholder_image_is_not_success(self):
        """A censored job comes back DONE with a substitute image."""
        task = Task(id="t", status="DONE", images=("c2FmZQ==",), censored=True)
        assert task.is_success is False

    def test_done_without_images(self):
        assert Task(id="t", status="DONE", censored=False).is_success is False

    def test_fail(self):
        task = Task(id="t", status="FAIL", error_description="boom")
        assert task.is_success is False

    def test_predicates_over_all_snapshots(self):
        for status, censored, images in itertools.product(STATUSES, CENSORED, IMAGES):
            task = Task(id="t", status=status, images=images, censored=censored)
            expected = status == "DONE" and censored is not True and images is not None
            assert task.is_success is expected
            if task.is_success:
                assert task.is_finished
                assert not task.is_censored
            if not task.is_finished:
                assert not task.is_censored


class TestTaskSnapshot:

    def test_frozen(self):
        task = Task(id="t", status="INITIAL")
        with pytest.raises(AttributeError):
            task.status = "DONE"  # type: ignore[misc]

    def test_status_constants(self):
        assert (Task.INITIAL, Task.PROCESSING, Task.DONE, Task.FAIL) == (
            "INITIAL", "PROCESSING", "DONE", "FAIL",
        )

    def test_decode_images(self):
        task = Task(id="t", status="DONE", images=("aGVsbG8=", "d29ybGQ="))
        assert task.decode_images() == [b"hello", b"world"]

    def test_decode_images_none(self):
        assert Task(id="t", status="PROCESSING").decode_images() == []


class TestAvailability:

    def test_status_active(self):
        assert Availability(status="ACTIVE").is_ready is True

    def test_model_status_active(self):
        assert Availability(model_status="ACTIVE").is_ready is True

    def test_either_shape_is_enough(self):
        assert Availability(status="DISABLED_BY_QUEUE", model_status="ACTIVE").is_ready is True

    def test_disabled(self):
        assert Availability(status="DISABLED_BY_QUEUE").is_ready is False

    def test_empty(self):
        assert Availability().is_ready is False


class TestGenerationOutcome:

    def test_accepted_tag(self):
        outcome = GenerationAccepted(task=Task(id="t", status="INITIAL"))
        assert outcome.accepted is True
        assert outcome.task.id == "t"

    def test_rejected_tag(self):
        outcome = GenerationRejected(reason='{"model_status": "DISABLED_BY_QUEUE"}')
        assert outcome.accepted is False
        assert not hasattr(outcome, "task")
