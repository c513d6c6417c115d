import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from job_referral.normalize.titles import core_form, normalize, strip_decoration  # noqa: E402

SAMPLES = [
    "",
    " ",
    "Senior Backend Engineer",
    "【急募】法人営業（東京）",
    "ＳＥ／ＰＭ　候補",
    "営業・企画 ― マネージャー",
    "〈新規〉事業開発《リーダー》",
    "--営業--",
    "・/・",
    "★☆ カスタマーサクセス ☆★",
    "エンジニア - - 募集",
    "Ｗｅｂディレクター／ｱｼｽﾀﾝﾄ",
]

# Inputs where folding or stripping leaves combining marks next to a new base character.
COMBINING_SAMPLES = [
    "ｶ】ﾞ",
    "ｶ ﾞ",
    "ｶ★ﾞ",
    "İﾞ",
    "Ａ \u0301",
    "\u2329営業\u232a",
]


class NormalizeTests(unittest.TestCase):
    def test_total_for_missing_and_non_string_input(self):
        self.assertEqual(normalize(None), "")
        self.assertEqual(normalize(123), "")
        self.assertEqual(strip_decoration(None), "")
        self.assertEqual(core_form(None), "")

    def test_removes_whitespace_and_folds_case(self):
        self.assertEqual(normalize("Senior　Backend Engineer"), "seniorbackendengineer")

    def test_folds_interpunct_dash_and_angle_brackets(self):
        self.assertEqual(normalize("営業・企画"), "営業/企画")
        self.assertEqual(normalize("営業―企画"), "営業-企画")
        self.assertEqual(normalize("〈急募〉営業"), "(急募)営業")

    def test_width_folding(self):
        self.assertEqual(normalize("ＳＥ（Ｗｅｂ）"), "se(web)")

    def test_idempotent(self):
        for sample in SAMPLES:
            with self.subTest(sample=sample):
                once = normalize(sample)
                self.assertEqual(normalize(once), once)
                stripped = strip_decoration(sample)
                self.assertEqual(strip_decoration(stripped), stripped)


class StripDecorationTests(unittest.TestCase):
    def test_removes_brackets_and_symbols(self):
        self.assertEqual(strip_decoration("【急募】法人営業"), "急募法人営業")
        self.assertEqual(strip_decoration("★カスタマーサクセス★"), "カスタマーサクセス")

    def test_removes_separator_runs_and_trims_edges(self):
        self.assertEqual(strip_decoration("--営業--"), "営業")
        self.assertEqual(strip_decoration("営業・/企画"), "営業企画")
        self.assertEqual(strip_decoration("/営業/"), "営業")

    def test_round_trip_is_stable(self):
        for sample in SAMPLES:
            with self.subTest(sample=sample):
                reduced = strip_decoration(normalize(sample))
                self.assertEqual(strip_decoration(normalize(reduced)), reduced)
                self.assertEqual(core_form(sample), reduced)

    def test_idempotent_with_combining_marks(self):
        for sample in COMBINING_SAMPLES:
            with self.subTest(sample=sample):
                once = normalize(sample)
                self.assertEqual(normalize(once), once)
                stripped = strip_decoration(sample)
                self.assertEqual(strip_decoration(stripped), stripped)
                core = core_form(sample)
                self.assertEqual(core_form(core), core)

    def test_voiced_mark_recomposes_after_stripping(self):
        self.assertEqual(core_form("ｶ】ﾞ"), "ガ")
        self.assertEqual(normalize("ｶ ﾞ"), "ガ")
        self.assertEqual(strip_decoration("\u2329営業\u232a"), "営業")


if __name__ == "__main__":
    unittest.main()
