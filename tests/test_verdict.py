import unittest

from jeemock.stats.verdict import DEFAULT_VERDICT, RULES, Band, classify


class VerdictTests(unittest.TestCase):
    # 15-question paper, max score 60

    def test_perfect(self) -> None:
        v = classify(60, 100, 15, 60)
        self.assertIs(v.band, Band.PERFECT)
        self.assertEqual(v.title, "Godlike!")

    def test_excellent(self) -> None:
        self.assertIs(classify(48, 100, 12, 60).band, Band.EXCELLENT)

    def test_cautious(self) -> None:
        self.assertIs(classify(20, 100, 5, 60).band, Band.CAUTIOUS)

    def test_guesswork(self) -> None:
        self.assertIs(classify(21, 50, 14, 60).band, Band.GUESSWORK)

    def test_critical(self) -> None:
        self.assertIs(classify(-5, 10, 10, 60).band, Band.CRITICAL)

    def test_balanced_between_bands(self) -> None:
        # accuracy high but percentage 60 falls between the two high-accuracy rules
        self.assertIs(classify(36, 90, 10, 60), DEFAULT_VERDICT)

    def test_guesswork_wins_over_critical(self) -> None:
        self.assertIs(classify(-5, 13, 15, 60).band, Band.GUESSWORK)

    def test_total_defaults_to_quarter_of_max(self) -> None:
        # 12 of 15 attempted is not above 80 %
        self.assertIs(classify(-3, 25, 12, 60).band, Band.CRITICAL)
        self.assertIs(classify(-3, 25, 13, 60).band, Band.GUESSWORK)

    def test_rule_order(self) -> None:
        self.assertEqual(
            [r.verdict.band for r in RULES],
            [Band.PERFECT, Band.EXCELLENT, Band.CAUTIOUS, Band.GUESSWORK, Band.CRITICAL],
        )


if __name__ == "__main__":
    unittest.main()
