import unittest

from core.scorer import COMPLETE_THRESHOLD, CompletionScore, score_candidate_profile, score_employer_profile
from core.scorer.candidate import score_contact, score_social_links
from core.scorer.models import round_half_up


def full_candidate():
    return {
        'personalInfo': {
            'fullName': 'Jane Doe',
            'title': 'Data Engineer',
            'experience': '3-5 years',
            'education': "Master's Degree",
            'profileImage': '/uploads/candidate-profiles/a.png',
            'cvUrl': '/uploads/candidate-cvs/a.pdf',
        },
        'profileDetails': {
            'nationality': 'Irish',
            'dateOfBirth': '1990-04-01',
            'gender': 'Female',
            'maritalStatus': 'Single',
            'biography': 'Pipelines and warehouses.',
        },
        'socialLinks': [{'platform': 'github', 'url': 'https://github.com/jane'}],
        'accountSettings': {
            'contact': {'location': 'Dublin', 'phone': '+353 1 555', 'email': 'jane@example.com'},
        },
    }


class TestCandidateScorer(unittest.TestCase):

    def test_only_full_name_scores_ten(self):
        score = score_candidate_profile({'personalInfo': {'fullName': 'Jane'}})
        self.assertEqual(score.percentage, 10)
        self.assertFalse(score.is_complete)

    def test_empty_and_missing_profiles_score_zero(self):
        self.assertEqual(score_candidate_profile(None).percentage, 0)
        self.assertEqual(score_candidate_profile({}).percentage, 0)
        self.assertEqual(score_candidate_profile({'personalInfo': 'garbage'}).percentage, 0)

    def test_full_profile_is_capped_at_hundred(self):
        score = score_candidate_profile(full_candidate())
        self.assertEqual(score.percentage, 100)
        self.assertTrue(score.is_complete)

    def test_boundary_79_is_incomplete(self):
        profile = full_candidate()
        # 40 required + 5 optional + 24 details + 10 links = 79
        del profile['personalInfo']['cvUrl']
        del profile['profileDetails']['biography']
        profile['accountSettings'] = {}
        score = score_candidate_profile(profile)
        self.assertEqual(score.percentage, 79)
        self.assertFalse(score.is_complete)

    def test_boundary_80_is_complete(self):
        profile = full_candidate()
        # 40 required + 10 optional + 30 details = 80
        profile['socialLinks'] = []
        profile['accountSettings'] = {}
        score = score_candidate_profile(profile)
        self.assertEqual(score.percentage, 80)
        self.assertTrue(score.is_complete)

    def test_blank_and_null_strings_do_not_count(self):
        profile = {'personalInfo': {'fullName': '   ', 'title': 'null', 'experience': ''}}
        self.assertEqual(score_candidate_profile(profile).percentage, 0)

    def test_date_counts_on_truthiness(self):
        profile = {'profileDetails': {'dateOfBirth': '1990-01-01'}}
        self.assertEqual(score_candidate_profile(profile).percentage, 6)

    def test_social_links_need_platform_and_url(self):
        self.assertEqual(score_social_links([{'platform': 'github', 'url': ''}]), 0)
        self.assertEqual(score_social_links([{'platform': '', 'url': 'https://x'}]), 0)
        self.assertEqual(score_social_links([{'platform': 'github', 'url': 'https://x'}]), 10)
        self.assertEqual(score_social_links(None), 0)
        self.assertEqual(score_social_links("github"), 0)

    def test_contact_is_capped_at_ten(self):
        contact = {'location': 'a', 'phone': 'b', 'email': 'c'}
        self.assertAlmostEqual(score_contact(contact), 9.99)
        self.assertLessEqual(score_contact(contact), 10)

    def test_scoring_is_deterministic(self):
        profile = full_candidate()
        self.assertEqual(score_candidate_profile(profile), score_candidate_profile(profile))


class TestEmployerScorer(unittest.TestCase):

    def test_empty_employer_profile(self):
        self.assertEqual(score_employer_profile({}).percentage, 0)

    def test_full_employer_profile(self):
        profile = {
            'phone': '555', 'email': 'hr@acme.io', 'location': 'Austin',
            'companyInfo': {
                'companyName': 'Acme', 'aboutUs': 'We make things',
                'logo': '/uploads/l.png', 'banner': '/uploads/b.png',
            },
            'foundingInfo': {
                'organizationType': 'LLC', 'industryType': 'Technology',
                'teamSize': '11-50', 'companyWebsite': 'https://acme.io',
            },
        }
        score = score_employer_profile(profile)
        self.assertEqual(score.percentage, 100)
        self.assertTrue(score.is_complete)

    def test_logo_outweighs_banner(self):
        with_logo = score_employer_profile({'companyInfo': {'logo': 'l.png'}})
        with_banner = score_employer_profile({'companyInfo': {'banner': 'b.png'}})
        # 1.5/11 and 0.5/11
        self.assertEqual(with_logo.percentage, 14)
        self.assertEqual(with_banner.percentage, 5)


class TestCompletionScore(unittest.TestCase):

    def test_threshold(self):
        self.assertEqual(COMPLETE_THRESHOLD, 80)
        self.assertFalse(CompletionScore.from_points(79).is_complete)
        self.assertTrue(CompletionScore.from_points(80).is_complete)

    def test_clamped(self):
        self.assertEqual(CompletionScore.from_points(130).percentage, 100)
        self.assertEqual(CompletionScore.from_points(-5).percentage, 0)

    def test_half_rounds_up(self):
        self.assertEqual(round_half_up(4.5), 5)
        self.assertEqual(round_half_up(79.5), 80)


if __name__ == "__main__":
    unittest.main()
