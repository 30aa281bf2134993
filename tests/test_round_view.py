"""
Tests for per-round applicant views: visibility, statistics,
filtering, sorting and pagination.
"""

import pytest

from placement_pipeline.core.config import Settings
from placement_pipeline.core.exceptions import NotFoundError, ValidationError
from placement_pipeline.models import Application, Student
from placement_pipeline.schemas.schemas import ApplicationStatus, RoundSort
from placement_pipeline.services.application_service import ApplicationService
from placement_pipeline.services.pipeline_service import PipelineService
from placement_pipeline.services.round_query_service import RoundQueryService, visible_status


@pytest.fixture
def rounds(db, settings):
    return RoundQueryService(db, settings)


@pytest.fixture
def pipeline(db, settings):
    return PipelineService(db, settings)


def ids(view):
    return [a.application_id for a in view.applications]


def test_visible_status_by_round_position(make_job_offer):
    job_offer = make_job_offer(rounds=3)
    job_offer.current_recruitment_stage = 2

    assert visible_status(job_offer, 1) == ApplicationStatus.rejected
    assert visible_status(job_offer, 2) == ApplicationStatus.in_progress
    assert visible_status(job_offer, 3) is None

    job_offer.current_recruitment_stage = 3
    assert visible_status(job_offer, 3) == ApplicationStatus.accepted


def test_active_round_shows_waiting_applicants(make_job_offer, apply_students, rounds):
    job_offer = make_job_offer(rounds=3)
    applications = apply_students(job_offer, 5)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1)

    assert sorted(ids(view)) == sorted(a.application_id for a in applications)
    assert view.is_active_round and not view.is_completed_round and not view.is_final_round
    assert view.current_round == 1
    assert view.round_stats.total == 5
    assert view.round_stats.in_progress == 5


def test_future_round_is_empty_but_stats_are_raw(make_job_offer, apply_students, rounds, pipeline):
    job_offer = make_job_offer(rounds=3)
    applications = apply_students(job_offer, 4)
    pipeline.push_to_next_round(
        job_offer.job_offer_id, job_offer.company_id,
        [a.application_id for a in applications[:2]], 1
    )

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 2)

    assert view.applications == []
    assert view.pagination.total == 0
    assert view.round_stats.in_progress == 2
    assert view.round_stats.total == 2


def test_completed_round_shows_only_rejected(make_job_offer, apply_students, rounds, pipeline):
    # Scenario: 5 applied, 3 pushed, round closed
    job_offer = make_job_offer(rounds=3)
    applications = apply_students(job_offer, 5)
    pushed = [a.application_id for a in applications[:3]]
    left_behind = [a.application_id for a in applications[3:]]
    pipeline.push_to_next_round(job_offer.job_offer_id, job_offer.company_id, pushed, 1)
    pipeline.advance_round(job_offer.job_offer_id, job_offer.company_id, 1)

    round_one = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1)
    round_two = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 2)

    assert sorted(ids(round_one)) == sorted(left_behind)
    assert round_one.is_completed_round and not round_one.is_active_round
    assert round_one.round_stats.total == 2
    assert round_one.round_stats.rejected == 2
    assert sorted(ids(round_two)) == sorted(pushed)
    assert round_two.is_active_round


def test_final_round_shows_accepted(make_job_offer, apply_students, rounds, pipeline):
    job_offer = make_job_offer(rounds=2)
    applications = apply_students(job_offer, 3)
    pushed = [applications[0].application_id]
    pipeline.push_to_next_round(job_offer.job_offer_id, job_offer.company_id, pushed, 1)
    pipeline.advance_round(job_offer.job_offer_id, job_offer.company_id, 1)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 2)

    assert ids(view) == pushed
    assert view.applications[0].application_status == ApplicationStatus.accepted.value
    assert view.is_final_round and view.is_active_round
    assert view.round_stats.accepted == 1


def test_sort_by_name(make_job_offer, make_student, db, rounds):
    job_offer = make_job_offer()
    service = ApplicationService(db)
    for name in ["Meera", "Arjun", "Zoya", "Kabir"]:
        service.apply(make_student(name=name).student_id, job_offer.job_offer_id)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, sort_by=RoundSort.name)

    assert [a.student_name for a in view.applications] == ["Arjun", "Kabir", "Meera", "Zoya"]


def test_sort_by_cgpa_puts_missing_last(make_job_offer, make_student, db, rounds):
    job_offer = make_job_offer()
    service = ApplicationService(db)
    for cgpa in [7.1, None, 9.4, 8.2]:
        service.apply(make_student(cgpa=cgpa).student_id, job_offer.job_offer_id)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, sort_by=RoundSort.cgpa)

    assert [a.cgpa for a in view.applications] == [9.4, 8.2, 7.1, None]


def test_sort_by_date_is_newest_first(make_job_offer, apply_students, rounds):
    job_offer = make_job_offer()
    applications = apply_students(job_offer, 3)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1)

    assert ids(view) == [a.application_id for a in reversed(applications)]


def test_unsupported_sort(make_job_offer, rounds):
    job_offer = make_job_offer()
    with pytest.raises(ValidationError):
        rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, sort_by="salary")


def test_department_filter(make_job_offer, apply_students, rounds):
    job_offer = make_job_offer()
    apply_students(job_offer, 2, department="CSE")
    ece = apply_students(job_offer, 3, department="ECE")

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, department="ECE")
    everyone = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, department="all")

    assert sorted(ids(view)) == sorted(a.application_id for a in ece)
    assert view.pagination.total == 3
    # Stats ignore filters
    assert view.round_stats.total == 5
    assert everyone.pagination.total == 5


def test_status_filter_cannot_widen_visibility(make_job_offer, apply_students, rounds):
    job_offer = make_job_offer()
    apply_students(job_offer, 2)

    view = rounds.get_round_view(
        job_offer.job_offer_id, job_offer.company_id, 1, status=ApplicationStatus.rejected
    )

    assert view.applications == []
    assert view.round_stats.total == 2


def test_pagination(make_job_offer, apply_students, rounds):
    job_offer = make_job_offer()
    applications = apply_students(job_offer, 5)
    newest_first = [a.application_id for a in reversed(applications)]

    page_two = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, page=2, limit=2)
    page_three = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1, page=3, limit=2)

    assert ids(page_two) == newest_first[2:4]
    assert ids(page_three) == newest_first[4:]
    assert page_two.pagination.pages == 3
    assert page_two.pagination.total == 5
    assert page_two.pagination.current == 2


def test_default_page_size_comes_from_settings(make_job_offer, apply_students, db):
    job_offer = make_job_offer()
    apply_students(job_offer, 3)
    service = RoundQueryService(db, Settings(database_url="sqlite://", default_page_size=2))

    view = service.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1)

    assert len(view.applications) == 2
    assert view.pagination.limit == 2


@pytest.mark.parametrize("kwargs", [
    {"round_number": 0},
    {"round_number": 1, "page": 0},
    {"round_number": 1, "limit": 101},
])
def test_invalid_paging_and_rounds(make_job_offer, rounds, kwargs):
    job_offer = make_job_offer()
    with pytest.raises(ValidationError):
        rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, **kwargs)


def test_other_company_cannot_view(make_job_offer, make_company, rounds):
    job_offer = make_job_offer()
    other = make_company(name="Globex")

    with pytest.raises(NotFoundError):
        rounds.get_round_view(job_offer.job_offer_id, other.company_id, 1)


def test_view_includes_student_details(make_job_offer, make_student, db, rounds):
    job_offer = make_job_offer()
    student = make_student(name="Ananya Rao", department="IT", cgpa=9.1)
    ApplicationService(db).apply(student.student_id, job_offer.job_offer_id)

    applicant = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1).applications[0]

    assert applicant.student_name == "Ananya Rao"
    assert applicant.department == "IT"
    assert applicant.cgpa == 9.1
    assert applicant.email == student.email
    assert db.query(Application).count() == 1


def test_directory_emails_are_returned_as_stored(make_job_offer, db, rounds):
    job_offer = make_job_offer()
    student = Student(full_name="Asha Menon", email="asha@campus.local", department="CSE", cgpa=8.7)
    db.add(student)
    db.commit()
    ApplicationService(db).apply(student.student_id, job_offer.job_offer_id)

    view = rounds.get_round_view(job_offer.job_offer_id, job_offer.company_id, 1)
    listing = ApplicationService(db).list_job_applications(job_offer.job_offer_id, job_offer.company_id)

    assert [a.email for a in view.applications] == ["asha@campus.local"]
    assert [a.email for a in listing] == ["asha@campus.local"]
