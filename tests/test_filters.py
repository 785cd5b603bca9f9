import unittest
from datetime import datetime, timezone

from sqlalchemy.dialects import postgresql, sqlite

from core.filters import FilterBuilder, PageInfo, PageRequest, is_unset, resolve_sort
from core.filters.builder import element_contains
from core.filters.queries import (
    JOB_DEFAULT_SORT,
    JOB_SORTS,
    JobListParams,
    JobSearchParams,
    job_list_filters,
    job_search_filters,
)
from core.utils import escape_like, split_csv
from database.models import Job

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def compiled(clause) -> str:
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


class TestUnsetValues(unittest.TestCase):

    def test_sentinels(self):
        for value in (None, "", "   ", "All", "all", [], ["", "All"]):
            self.assertTrue(is_unset(value), value)

    def test_real_values(self):
        for value in ("python", 0, False, ["", "go"]):
            self.assertFalse(is_unset(value), value)


class TestFilterBuilder(unittest.TestCase):

    def test_unset_filters_add_nothing(self):
        builder = FilterBuilder()
        builder.equals(Job.job_type, "All")
        builder.text(Job.city, "")
        builder.text_group([Job.job_title, Job.job_description], None)
        builder.flag(Job.is_remote, False)
        builder.range_overlap(Job.salary_min, Job.salary_max, None, 0)
        self.assertEqual(builder.conditions, [])

    def test_list_filters_only_open_jobs_by_default(self):
        conditions = job_list_filters(JobListParams(), NOW).conditions
        self.assertEqual(len(conditions), 2)
        self.assertIn("jobs.status = 'Active'", compiled(conditions[0]))

    def test_salary_overlap(self):
        builder = FilterBuilder().range_overlap(Job.salary_min, Job.salary_max, 50000, 90000)
        sql = [compiled(c) for c in builder.conditions]
        self.assertEqual(sql, ["jobs.salary_max >= 50000", "jobs.salary_min <= 90000"])

    def test_text_group_is_or_within_group(self):
        builder = FilterBuilder().text_group([Job.job_title, Job.job_description], "Python")
        sql = compiled(builder.build())
        self.assertIn(" OR ", sql)
        self.assertIn("lower(jobs.job_title) LIKE lower('%Python%')", sql)

    def test_groups_are_anded(self):
        params = JobSearchParams(keyword="python", city="Austin", tags=["aws", "gcp"])
        conditions = job_search_filters(params, NOW).conditions
        # two base conditions + keyword + city + tags
        self.assertEqual(len(conditions), 5)

    def test_tags_are_matched_per_element(self):
        clause = element_contains(Job.tags, "café")
        self.assertIn("json_each(jobs.tags)", compiled(clause))
        self.assertIn(".value) LIKE lower('%café%')", compiled(clause))
        pg_sql = str(clause.compile(dialect=postgresql.dialect()))
        self.assertIn("jsonb_array_elements_text(jobs.tags)", pg_sql)

    def test_like_wildcards_are_escaped(self):
        self.assertEqual(escape_like("50%_off"), "50\\%\\_off")
        sql = compiled(FilterBuilder().text(Job.city, "50%").build())
        self.assertIn("50\\%", sql)


class TestPagination(unittest.TestCase):

    def test_page_request_defaults_and_bounds(self):
        self.assertEqual(PageRequest.build(None, None), PageRequest(page=1, limit=10))
        self.assertEqual(PageRequest.build(0, -3, default_limit=20), PageRequest(page=1, limit=20))
        self.assertEqual(PageRequest.build(2, 500, max_limit=100).limit, 100)
        self.assertEqual(PageRequest(page=3, limit=10).offset, 20)

    def test_page_info(self):
        info = PageInfo.build(PageRequest(page=2, limit=10), 25)
        self.assertEqual(info.to_dict(), {
            'currentPage': 2,
            'totalPages': 3,
            'totalItems': 25,
            'hasNextPage': True,
            'hasPrevPage': True,
        })

    def test_empty_result(self):
        info = PageInfo.build(PageRequest(page=1, limit=10), 0)
        self.assertEqual(info.total_pages, 0)
        self.assertFalse(info.has_next_page)
        self.assertFalse(info.has_prev_page)


class TestSorting(unittest.TestCase):

    def test_allowlisted_field(self):
        clauses = resolve_sort("salary", "asc", JOB_SORTS, JOB_DEFAULT_SORT)
        self.assertEqual(compiled(clauses[0]), "jobs.salary_max ASC")

    def test_unknown_field_falls_back_to_default(self):
        with self.assertLogs("core.filters.builder", level="WARNING"):
            clauses = resolve_sort("password; DROP TABLE jobs", "asc", JOB_SORTS, JOB_DEFAULT_SORT)
        self.assertEqual(compiled(clauses[0]), "jobs.posted_date ASC")

    def test_relevance_pins_direction(self):
        clauses = resolve_sort("relevance", "asc", JOB_SORTS, JOB_DEFAULT_SORT)
        self.assertEqual([compiled(c) for c in clauses], ["jobs.is_featured DESC", "jobs.posted_date DESC"])

    def test_descending_by_default(self):
        clauses = resolve_sort(None, None, JOB_SORTS, JOB_DEFAULT_SORT)
        self.assertEqual(compiled(clauses[0]), "jobs.posted_date DESC")


class TestSplitCsv(unittest.TestCase):

    def test_split(self):
        self.assertEqual(split_csv("python, sql ,,aws"), ["python", "sql", "aws"])
        self.assertEqual(split_csv([" go ", ""]), ["go"])
        self.assertEqual(split_csv(None), [])


if __name__ == "__main__":
    unittest.main()
