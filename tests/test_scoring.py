import unittest

from jeemock.models import Response, Subject
from jeemock.session.status import QuestionStatus
from jeemock.stats.scoring import Outcome, ScoringScheme, score_session, subject_chart_data
from jeemock.stats.stats import format_summary, share_text
from jeemock.stats.verdict import Band

from tests.factories import mcq, numerical


def _answer(qid: str, value, seconds: int = 0) -> Response:
    status = QuestionStatus.NOT_ANSWERED if value is None else QuestionStatus.ANSWERED
    return Response(question_id=qid, selected_option=value, status=status, time_spent_seconds=seconds)


class FifteenQuestionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.questions = [mcq(f"q{i}") for i in range(15)]
        answers = ["0"] * 10 + ["1"] * 3 + [None] * 2
        self.responses = [_answer(q.id, a, seconds=10) for q, a in zip(self.questions, answers)]
        self.report = score_session(self.questions, self.responses)

    def test_counts_and_score(self) -> None:
        r = self.report
        self.assertEqual(r.total_questions, 15)
        self.assertEqual(r.correct, 10)
        self.assertEqual(r.incorrect, 3)
        self.assertEqual(r.unattempted, 2)
        self.assertEqual(r.attempted, 13)
        self.assertEqual(r.score, 37)
        self.assertEqual(r.max_score, 60)
        self.assertEqual(r.accuracy, 77)

    def test_derived_figures(self) -> None:
        r = self.report
        self.assertEqual(r.percentage, 62)
        self.assertAlmostEqual(r.percentile, 97.3)
        self.assertEqual(r.total_time_seconds, 150)
        self.assertEqual(r.avg_time_per_attempt, 12)
        self.assertIs(r.verdict.band, Band.BALANCED)

    def test_scoring_twice_gives_equal_reports(self) -> None:
        self.assertEqual(score_session(self.questions, self.responses), self.report)

    def test_summary_text_mentions_score(self) -> None:
        self.assertIn("Score: 37/60", format_summary(self.report))
        self.assertIn("Percentile: 97.3%ile", share_text(self.report))


class CorrectnessRuleTests(unittest.TestCase):
    def test_numerical_is_trimmed_but_not_normalised(self) -> None:
        qs = [numerical("a", answer="5.4"), numerical("b", answer="5.4"), numerical("c", answer=" 12 ")]
        rs = [_answer("a", "5.4 "), _answer("b", "5.40"), _answer("c", "12")]
        report = score_session(qs, rs)
        self.assertEqual([o.outcome for o in report.outcomes], [Outcome.CORRECT, Outcome.WRONG, Outcome.CORRECT])

    def test_mcq_is_exact(self) -> None:
        report = score_session([mcq("a", answer="2")], [_answer("a", " 2")])
        self.assertEqual(report.incorrect, 1)

    def test_unknown_and_missing_responses(self) -> None:
        qs = [mcq("a"), mcq("b")]
        rs = [_answer("a", "0"), _answer("ghost", "0")]
        report = score_session(qs, rs)
        self.assertEqual(report.correct, 1)
        self.assertEqual(report.unattempted, 1)
        self.assertEqual(report.attempted, 1)

    def test_nothing_attempted(self) -> None:
        report = score_session([mcq("a"), mcq("b")], [])
        self.assertEqual(report.accuracy, 0)
        self.assertEqual(report.score, 0)
        self.assertEqual(report.avg_time_per_attempt, 0)

    def test_custom_scheme(self) -> None:
        scheme = ScoringScheme(correct=3, incorrect=0)
        report = score_session([mcq("a"), mcq("b")], [_answer("a", "0"), _answer("b", "3")], scheme)
        self.assertEqual(report.score, 3)
        self.assertEqual(report.max_score, 6)


class SubjectBreakdownTests(unittest.TestCase):
    def test_per_subject_accuracy_and_all_subjects_reported(self) -> None:
        qs = [mcq("p1", Subject.PHYSICS), mcq("p2", Subject.PHYSICS), mcq("p3", Subject.PHYSICS), mcq("c1", Subject.CHEMISTRY)]
        rs = [_answer("p1", "0"), _answer("p2", "0"), _answer("p3", "1"), _answer("c1", None)]
        report = score_session(qs, rs)
        self.assertEqual([b.subject for b in report.by_subject], [Subject.PHYSICS, Subject.CHEMISTRY, Subject.MATHS])
        phy = report.subject(Subject.PHYSICS)
        self.assertEqual((phy.correct, phy.incorrect, phy.accuracy), (2, 1, 67))
        chem = report.subject(Subject.CHEMISTRY)
        self.assertEqual((chem.attempted, chem.skipped, chem.accuracy), (0, 1, 0))
        self.assertEqual(report.subject(Subject.MATHS).total, 0)

    def test_chart_rows(self) -> None:
        report = score_session([mcq("p1", Subject.PHYSICS)], [_answer("p1", "0")])
        data = subject_chart_data(report)
        self.assertEqual(data["radar"][0], {"subject": "Physics", "accuracy": 100, "fullMark": 100})
        self.assertEqual(data["bars"][2]["name"], "Math")
        self.assertEqual(data["pie"][0], {"name": "Correct", "value": 1})


if __name__ == "__main__":
    unittest.main()
