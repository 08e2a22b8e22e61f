"""
Quest Session Engine Tests

Coverage:
- idempotent start, question draw and snapshot
- scoring, progression and the one-way solved flag
- qualification at three correct answers with problem assignment
- exhaustion path (all questions resolved below threshold)
- timeout force-completion
- at-most-once completion
- reset
"""
import random
from datetime import timedelta

import pytest
from sqlalchemy import select, func, update

from cipherquest.errors import (
    ErrorCode,
    NotFoundError,
    DisqualifiedError,
    AlreadyCompletedError,
    AlreadySolvedError,
    AttemptsExhaustedError,
    TimeExceededError,
    NoContentAvailableError,
    BadRequestError,
)
from cipherquest.orm import QuestSession, QuestionAttempt, Submission, Team
from cipherquest.services import quest_engine, submission_service
from cipherquest.services.notifier import Notifier, NotificationKind, SimulatedNotifier
from cipherquest.tests.conftest import T0


def at(seconds: float):
    return T0 + timedelta(seconds=seconds)


async def started(db, team, rng_seed=7):
    return await quest_engine.start_quest(db, team.id, rng=random.Random(rng_seed), now=T0)


async def solve(db, session, team, question, seconds=10, **kwargs):
    return await quest_engine.submit_guess(
        db, session.id, question["id"], question["correct_answer"], team.id, now=at(seconds), **kwargs
    )


async def miss(db, session, team, question, seconds=10, guess="zzzzz", **kwargs):
    return await quest_engine.submit_guess(
        db, session.id, question["id"], guess, team.id, now=at(seconds), **kwargs
    )


# =============================================================================
# Start
# =============================================================================

class TestStartQuest:

    async def test_start_creates_session_with_five_distinct_questions(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)

        session = await started(db_session, team)

        assert session.id is not None
        assert session.team_id == team.id
        assert len(session.questions) == 5
        assert len({q["id"] for q in session.questions}) == 5
        assert session.quest_duration == 1800
        assert session.started_at == T0
        assert session.current_question_index == 0
        assert session.score == 0
        assert session.correct_answers == 0
        assert session.is_completed is False
        assert session.assigned_problem_id is None

    async def test_start_is_idempotent(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)

        first = await started(db_session, team, rng_seed=1)
        second = await started(db_session, team, rng_seed=2)

        assert first.id == second.id
        assert first.questions == second.questions
        count = (await db_session.execute(select(func.count()).select_from(QuestSession))).scalar()
        assert count == 1

    async def test_same_seed_draws_same_questions(self, db_session, make_team, make_questions):
        await make_questions(db_session)
        team_a = await make_team(db_session)
        team_b = await make_team(db_session)

        a = await started(db_session, team_a, rng_seed=42)
        b = await started(db_session, team_b, rng_seed=42)

        assert [q["id"] for q in a.questions] == [q["id"] for q in b.questions]

    async def test_snapshot_is_unaffected_by_later_bank_edits(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        questions = await make_questions(db_session)
        session = await started(db_session, team)

        for question in questions:
            question.correct_answer = "changed"
        await db_session.commit()

        assert all(q["correct_answer"] != "changed" for q in session.questions)
        result = await solve(db_session, session, team, session.questions[0])
        assert result["is_correct"] is True

    async def test_only_active_questions_are_drawn(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        questions = await make_questions(db_session, [
            {"correct_answer": f"word{i}", "is_active": i != 0} for i in range(6)
        ])

        session = await started(db_session, team)

        assert questions[0].id not in {q["id"] for q in session.questions}

    async def test_unknown_team(self, db_session, make_questions):
        await make_questions(db_session)
        with pytest.raises(NotFoundError) as exc:
            await quest_engine.start_quest(db_session, 999)
        assert exc.value.code == ErrorCode.TEAM_NOT_FOUND

    async def test_disqualified_team_cannot_start(self, db_session, make_team, make_questions):
        team = await make_team(db_session, is_disqualified=True)
        await make_questions(db_session)
        with pytest.raises(DisqualifiedError):
            await started(db_session, team)

    async def test_pool_smaller_than_five_fails_without_creating_session(
        self, db_session, make_team, make_questions
    ):
        team = await make_team(db_session)
        await make_questions(db_session, [{"correct_answer": f"w{i}"} for i in range(4)])

        with pytest.raises(NoContentAvailableError) as exc:
            await started(db_session, team)

        assert exc.value.status_code == 503
        assert exc.value.details == {"required": 5, "available": 4}
        assert await quest_engine.get_session_for_team(db_session, team.id) is None


# =============================================================================
# Guessing
# =============================================================================

class TestSubmitGuess:

    async def test_correct_guess_scores_ten_per_difficulty(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session, [{"correct_answer": f"word{i}", "difficulty": 3} for i in range(5)])
        session = await started(db_session, team)

        result = await solve(db_session, session, team, session.questions[0], seconds=45)

        assert result["is_correct"] is True
        assert result["score"] == 30
        assert result["correct_answers"] == 1
        assert result["attempts"] == 1
        assert result["remaining_attempts"] == 2
        assert result["time_elapsed"] == 45
        assert result["time_remaining"] == 1755
        assert result["quest_completed"] is False
        assert all(item["status"] == "correct" for item in result["feedback"])

        await db_session.refresh(session)
        assert session.score == 30
        assert session.current_question_index == 1
        await db_session.refresh(team)
        assert team.quest_score == 30

    async def test_guess_is_trimmed_and_case_insensitive(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)
        question = session.questions[0]

        result = await quest_engine.submit_guess(
            db_session, session.id, question["id"], f"  {question['correct_answer'].upper()} ", team.id, now=at(5)
        )

        assert result["is_correct"] is True

    async def test_wrong_guess_returns_feedback_and_remaining_attempts(
        self, db_session, make_team, make_questions
    ):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        result = await miss(db_session, session, team, session.questions[0], guess="qqq")

        assert result["is_correct"] is False
        assert result["attempts"] == 1
        assert result["max_attempts"] == 3
        assert result["remaining_attempts"] == 2
        assert len(result["feedback"]) == 3
        assert result["score"] == 0
        assert result["correct_answers"] == 0
        assert result["assigned_problem"] is None

        await db_session.refresh(session)
        assert session.current_question_index == 0

    async def test_guess_history_is_appended(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)
        question = session.questions[0]

        await miss(db_session, session, team, question, guess="first")
        await miss(db_session, session, team, question, guess="second")
        await solve(db_session, session, team, question)

        attempt = (await db_session.execute(
            select(QuestionAttempt).where(QuestionAttempt.quest_session_id == session.id)
        )).scalar_one()
        assert attempt.attempts == ["first", "second", question["correct_answer"]]
        assert attempt.is_correct is True
        assert attempt.completed_at is not None

    async def test_solved_question_rejects_any_guess(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)
        question = session.questions[0]
        await solve(db_session, session, team, question)

        for guess in (question["correct_answer"], "wrong"):
            with pytest.raises(AlreadySolvedError):
                await quest_engine.submit_guess(db_session, session.id, question["id"], guess, team.id, now=at(20))

        await db_session.refresh(session)
        assert session.score == 10 * question["difficulty"]
        assert session.correct_answers == 1

    async def test_attempts_exhausted(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session, max_attempts=2)
        session = await started(db_session, team)
        question = session.questions[0]

        await miss(db_session, session, team, question)
        last = await miss(db_session, session, team, question)
        assert last["remaining_attempts"] == 0

        with pytest.raises(AttemptsExhaustedError):
            await solve(db_session, session, team, question)

        await db_session.refresh(session)
        assert session.current_question_index == 1
        assert session.correct_answers == 0

    async def test_question_outside_session_is_not_found(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        questions = await make_questions(db_session)
        session = await started(db_session, team)
        drawn = {q["id"] for q in session.questions}
        outside = next(q for q in questions if q.id not in drawn)

        with pytest.raises(NotFoundError) as exc:
            await quest_engine.submit_guess(
                db_session, session.id, outside.id, outside.correct_answer, team.id, now=at(5)
            )
        assert exc.value.code == ErrorCode.QUESTION_NOT_FOUND

    async def test_session_of_another_team_is_not_found(self, db_session, make_team, make_questions):
        owner = await make_team(db_session)
        intruder = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, owner)

        with pytest.raises(NotFoundError) as exc:
            await solve(db_session, session, intruder, session.questions[0])
        assert exc.value.code == ErrorCode.SESSION_NOT_FOUND

    async def test_unknown_session(self, db_session, make_team):
        team = await make_team(db_session)
        with pytest.raises(NotFoundError):
            await quest_engine.submit_guess(db_session, 12345, 1, "alpha", team.id)

    async def test_blank_guess_rejected(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        with pytest.raises(BadRequestError) as exc:
            await miss(db_session, session, team, session.questions[0], guess="   ")
        assert exc.value.code == ErrorCode.MISSING_FIELD

    async def test_correct_answers_never_decrease(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        seen = []
        questions = session.questions
        plan = [(questions[0], False), (questions[0], True), (questions[1], False), (questions[1], True)]
        for i, (question, correct) in enumerate(plan):
            if correct:
                result = await solve(db_session, session, team, question, seconds=10 + i)
            else:
                result = await miss(db_session, session, team, question, seconds=10 + i)
            seen.append(result["correct_answers"])

        assert seen == sorted(seen)
        assert seen[-1] == 2


# =============================================================================
# Completion
# =============================================================================

class TestCompletion:

    async def test_third_correct_answer_qualifies_and_assigns_matching_domain(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session, [{"correct_answer": f"word{i}", "problem_domain": "security"} for i in range(5)])
        await make_problem(db_session, "web", title="Web Problem")
        security = await make_problem(db_session, "security", title="Security Problem")
        session = await started(db_session, team)

        await solve(db_session, session, team, session.questions[0], seconds=100)
        await solve(db_session, session, team, session.questions[1], seconds=200)
        result = await solve(db_session, session, team, session.questions[2], seconds=300)

        assert result["quest_completed"] is True
        assert result["qualified"] is True
        assert result["assigned_problem"]["id"] == security.id
        assert result["correct_answers"] == 3

        await db_session.refresh(session)
        assert session.is_completed is True
        assert session.completed_at == at(300)
        assert session.assigned_problem_id == security.id

        await db_session.refresh(team)
        assert team.current_stage == 2
        assert team.is_disqualified is False

        submission = (await db_session.execute(
            select(Submission).where(Submission.team_id == team.id)
        )).scalar_one()
        assert submission.problem_id == security.id
        assert submission.quest_completion_time == 300
        assert submission.is_submitted is False

    async def test_no_matching_domain_falls_back_to_any_active_problem(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session, [{"correct_answer": f"word{i}", "problem_domain": "health"} for i in range(5)])
        await make_problem(db_session, "security", is_active=False)
        web = await make_problem(db_session, "web")
        session = await started(db_session, team)

        for i in range(3):
            result = await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))

        assert result["qualified"] is True
        assert result["assigned_problem"]["id"] == web.id

    async def test_qualified_without_any_problem_stays_qualified(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        for i in range(3):
            result = await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))

        assert result["quest_completed"] is True
        assert result["qualified"] is True
        assert result["assigned_problem"] is None

        await db_session.refresh(team)
        assert team.current_stage == 2
        assert team.is_disqualified is False
        count = (await db_session.execute(select(func.count()).select_from(Submission))).scalar()
        assert count == 0

    async def test_all_questions_exhausted_below_threshold_disqualifies(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session, max_attempts=1)
        await make_problem(db_session, "security")
        session = await started(db_session, team)
        questions = session.questions

        await solve(db_session, session, team, questions[0], seconds=10)
        await solve(db_session, session, team, questions[1], seconds=20)
        await miss(db_session, session, team, questions[2], seconds=30)
        fourth = await miss(db_session, session, team, questions[3], seconds=40)
        assert fourth["quest_completed"] is False

        last = await miss(db_session, session, team, questions[4], seconds=50)

        assert last["quest_completed"] is True
        assert last["qualified"] is False
        assert last["assigned_problem"] is None

        await db_session.refresh(session)
        assert session.is_completed is True
        assert session.assigned_problem_id is None
        assert session.current_question_index == 4

        await db_session.refresh(team)
        assert team.is_disqualified is True
        assert team.current_stage == 1

    async def test_completed_session_rejects_guesses_and_keeps_state(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session)
        await make_problem(db_session, "security")
        session = await started(db_session, team)
        for i in range(3):
            await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))
        await db_session.refresh(session)
        before = (session.score, session.correct_answers, session.assigned_problem_id)

        with pytest.raises(AlreadyCompletedError):
            await solve(db_session, session, team, session.questions[3], seconds=100)

        await db_session.refresh(session)
        assert (session.score, session.correct_answers, session.assigned_problem_id) == before

    async def test_completion_happens_at_most_once(self, db_session, make_team, make_questions, make_problem):
        team = await make_team(db_session)
        await make_questions(db_session)
        problem = await make_problem(db_session, "security")
        session = await started(db_session, team)

        first = await quest_engine.complete_quest_session(
            db_session, session.id, team.id, correct_answers=3, elapsed_seconds=1000.4, now=at(1000)
        )
        second = await quest_engine.complete_quest_session(
            db_session, session.id, team.id, correct_answers=3, elapsed_seconds=1500, now=at(1500)
        )
        await db_session.commit()

        assert first["performed"] is True
        assert second["performed"] is False
        assert first["assigned_problem"].id == problem.id

        await db_session.refresh(session)
        assert session.completed_at == at(1000)

        submissions = (await db_session.execute(
            select(Submission).where(Submission.team_id == team.id)
        )).scalars().all()
        assert len(submissions) == 1
        assert submissions[0].quest_completion_time == 1000

    async def test_completion_keeps_existing_completion_time(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session)
        problem = await make_problem(db_session, "security")
        db_session.add(Submission(team_id=team.id, problem_id=problem.id, quest_completion_time=42))
        await db_session.commit()
        session = await started(db_session, team)

        await quest_engine.complete_quest_session(
            db_session, session.id, team.id, correct_answers=3, elapsed_seconds=900
        )
        await db_session.commit()

        submission = (await db_session.execute(
            select(Submission).where(Submission.team_id == team.id)
        )).scalar_one()
        assert submission.quest_completion_time == 42

    async def test_qualification_notifies_team_lead(self, db_session, make_team, make_questions, make_problem):
        notifier = SimulatedNotifier()
        team = await make_team(db_session, lead_email="captain@example.com")
        await make_questions(db_session)
        await make_problem(db_session, "security", title="Assigned Thing")
        session = await started(db_session, team)

        for i in range(3):
            await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1), notifier=notifier)

        assert len(notifier.sent) == 1
        assert notifier.sent[0]["kind"] == NotificationKind.QUALIFICATION
        assert notifier.sent[0]["recipient"] == "captain@example.com"
        assert "Assigned Thing" in notifier.sent[0]["body"]

    async def test_failing_notifier_does_not_block_completion(
        self, db_session, make_team, make_questions, make_problem
    ):
        class BrokenNotifier(Notifier):
            async def _deliver(self, recipient, message, kind):
                raise ConnectionError("smtp down")

        failures = []
        notifier = BrokenNotifier()
        notifier.on_failure(lambda kind, recipient, reason: failures.append((kind, recipient)))

        team = await make_team(db_session)
        await make_questions(db_session)
        await make_problem(db_session, "security")
        session = await started(db_session, team)

        for i in range(3):
            result = await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1), notifier=notifier)

        assert result["quest_completed"] is True
        assert failures == [(NotificationKind.QUALIFICATION, team.lead_email)]


# =============================================================================
# Timeout
# =============================================================================

class TestTimeout:

    async def test_timeout_with_two_correct_disqualifies(self, db_session, make_team, make_questions, make_problem):
        team = await make_team(db_session)
        await make_questions(db_session)
        await make_problem(db_session, "security")
        session = await started(db_session, team)
        await solve(db_session, session, team, session.questions[0], seconds=10)
        await solve(db_session, session, team, session.questions[1], seconds=20)

        with pytest.raises(TimeExceededError) as exc:
            await solve(db_session, session, team, session.questions[2], seconds=1801)

        assert exc.value.code == ErrorCode.TIME_EXCEEDED
        assert exc.value.qualified is False
        assert exc.value.details["completed"] is True
        assert exc.value.details["assigned_problem_id"] is None

        await db_session.refresh(session)
        assert session.is_completed is True
        assert session.correct_answers == 2
        assert session.assigned_problem_id is None

        await db_session.refresh(team)
        assert team.is_disqualified is True
        assert team.current_stage == 1

        attempts = (await db_session.execute(
            select(func.count()).select_from(QuestionAttempt).where(QuestionAttempt.question_id == session.questions[2]["id"])
        )).scalar()
        assert attempts == 0

    async def test_timeout_with_three_correct_qualifies(self, db_session, make_team, make_questions, make_problem):
        team = await make_team(db_session)
        await make_questions(db_session)
        problem = await make_problem(db_session, "security")
        session = await started(db_session, team)
        # correct answers already at the threshold when time runs out
        await db_session.execute(
            update(QuestSession)
            .where(QuestSession.id == session.id)
            .values(correct_answers=3, score=60)
        )
        await db_session.commit()
        await db_session.refresh(session)

        with pytest.raises(TimeExceededError) as exc:
            await miss(db_session, session, team, session.questions[3], seconds=1801)

        assert exc.value.qualified is True
        assert exc.value.assigned_problem_id == problem.id

        await db_session.refresh(team)
        assert team.is_disqualified is False
        assert team.current_stage == 2

    async def test_guess_at_exact_deadline_is_accepted(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        result = await solve(db_session, session, team, session.questions[0], seconds=1800)

        assert result["is_correct"] is True
        assert result["time_remaining"] == 0

    async def test_time_elapsed_is_rounded_not_truncated(self, db_session, make_team, make_questions):
        await make_questions(db_session)
        early = await make_team(db_session)
        late = await make_team(db_session)
        early_session = await started(db_session, early)
        late_session = await started(db_session, late)

        with pytest.raises(TimeExceededError) as exc:
            await solve(db_session, early_session, early, early_session.questions[0], seconds=1800.4)
        assert exc.value.time_elapsed == 1800

        with pytest.raises(TimeExceededError) as exc:
            await solve(db_session, late_session, late, late_session.questions[0], seconds=1800.6)
        assert exc.value.time_elapsed == 1801
        assert exc.value.details["time_elapsed"] == 1801

    async def test_second_guess_after_timeout_is_already_completed(self, db_session, make_team, make_questions):
        team = await make_team(db_session)
        await make_questions(db_session)
        session = await started(db_session, team)

        with pytest.raises(TimeExceededError):
            await solve(db_session, session, team, session.questions[0], seconds=2000)
        with pytest.raises(AlreadyCompletedError):
            await solve(db_session, session, team, session.questions[0], seconds=2001)


# =============================================================================
# Reset & leaderboard
# =============================================================================

class TestResetAndLeaderboard:

    async def test_reset_clears_session_attempts_and_team_flags(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session, max_attempts=1)
        await make_problem(db_session, "security")
        session = await started(db_session, team)
        for question in session.questions:
            await miss(db_session, session, team, question)
        await db_session.refresh(team)
        assert team.is_disqualified is True

        result = await quest_engine.reset_quest(db_session, team.id)

        assert result["success"] is True
        assert await quest_engine.get_session_for_team(db_session, team.id) is None
        attempts = (await db_session.execute(select(func.count()).select_from(QuestionAttempt))).scalar()
        assert attempts == 0

        team = (await db_session.execute(select(Team).where(Team.id == team.id))).scalar_one()
        assert team.current_stage == 1
        assert team.is_disqualified is False
        assert team.quest_score == 0

        fresh = await started(db_session, team)
        assert fresh.correct_answers == 0
        assert fresh.is_completed is False

    async def test_reset_removes_unsubmitted_stub(self, db_session, make_team, make_questions, make_problem):
        team = await make_team(db_session)
        await make_questions(db_session)
        await make_problem(db_session, "security")
        session = await started(db_session, team)
        for i in range(3):
            await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))

        await quest_engine.reset_quest(db_session, team.id)

        count = (await db_session.execute(select(func.count()).select_from(Submission))).scalar()
        assert count == 0

    async def test_requalifying_keeps_submitted_project_problem(
        self, db_session, make_team, make_questions, make_problem
    ):
        team = await make_team(db_session)
        await make_questions(db_session, [{"correct_answer": f"word{i}"} for i in range(6)])
        original = await make_problem(db_session, "security", title="Original")
        session = await started(db_session, team)
        for i in range(3):
            await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))
        await submission_service.submit_project(db_session, team.id, ppt_url="https://slides.example.com")

        original.is_active = False
        await db_session.commit()
        replacement = await make_problem(db_session, "security", title="Replacement")

        await quest_engine.reset_quest(db_session, team.id)
        session = await started(db_session, team, rng_seed=8)
        for i in range(3):
            await solve(db_session, session, team, session.questions[i], seconds=10 * (i + 1))

        await db_session.refresh(session)
        assert session.assigned_problem_id == replacement.id

        submission = (await db_session.execute(
            select(Submission).where(Submission.team_id == team.id)
        )).scalar_one()
        await db_session.refresh(submission)
        assert submission.is_submitted is True
        assert submission.problem_id == original.id

    async def test_reset_unknown_team(self, db_session):
        with pytest.raises(NotFoundError):
            await quest_engine.reset_quest(db_session, 404)

    async def test_cipher_leaderboard_ranks_completed_sessions(self, db_session, make_team, make_questions):
        await make_questions(db_session, [{"correct_answer": f"word{i}", "difficulty": 2} for i in range(6)])
        fast = await make_team(db_session, team_name="Fast")
        slow = await make_team(db_session, team_name="Slow")
        idle = await make_team(db_session, team_name="Idle")

        for team, base in ((fast, 0), (slow, 500)):
            session = await started(db_session, team)
            for i in range(3):
                await solve(db_session, session, team, session.questions[i], seconds=base + 10 * (i + 1))
        await started(db_session, idle)

        board = await quest_engine.get_cipher_leaderboard(db_session)

        assert [row["team_name"] for row in board] == ["Fast", "Slow"]
        assert board[0]["rank"] == 1
        assert board[0]["score"] == 60
        assert board[0]["correct_answers"] == 3
        assert board[0]["accuracy"] == 60
