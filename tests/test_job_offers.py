"""
Tests for job offer creation, ownership and cancellation.
"""

import pytest

from placement_pipeline.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from placement_pipeline.schemas.schemas import JobStatus, RecruitmentStageIn
from placement_pipeline.services.job_offer_service import JobOfferService, order_stages
from placement_pipeline.services.pipeline_service import PipelineService

from tests.conftest import job_offer_payload


def test_create_job_offer_starts_in_round_one(make_job_offer):
    job_offer = make_job_offer(rounds=3)

    assert job_offer.total_rounds == 3
    assert job_offer.current_recruitment_stage == 1
    assert job_offer.current_application_count == 0
    assert job_offer.job_status == JobStatus.open.value
    assert [s.stage_order for s in job_offer.recruitment_process] == [1, 2, 3]


def test_create_job_offer_unknown_company(db):
    with pytest.raises(NotFoundError):
        JobOfferService(db).create_job_offer(999, job_offer_payload())


def test_order_stages_numbers_by_position():
    stages = order_stages([
        RecruitmentStageIn(stage_name="Aptitude"),
        RecruitmentStageIn(stage_name="Technical"),
    ])
    assert [(s.stage_order, s.stage_name) for s in stages] == [(1, "Aptitude"), (2, "Technical")]


def test_order_stages_sorts_explicit_orders():
    stages = order_stages([
        RecruitmentStageIn(stage_name="HR", stage_order=3),
        RecruitmentStageIn(stage_name="Aptitude", stage_order=1),
        RecruitmentStageIn(stage_name="Technical", stage_order=2),
    ])
    assert [s.stage_name for s in stages] == ["Aptitude", "Technical", "HR"]


@pytest.mark.parametrize("orders", [[1, 3], [2, 3], [1, 1]])
def test_order_stages_rejects_gaps_and_duplicates(orders):
    with pytest.raises(ValidationError):
        order_stages([RecruitmentStageIn(stage_name=f"Stage {o}", stage_order=o) for o in orders])


def test_order_stages_requires_a_stage():
    with pytest.raises(ValidationError):
        order_stages([])


def test_get_owned_job_offer_hides_other_companies(make_job_offer, make_company, db):
    job_offer = make_job_offer()
    other = make_company(name="Globex")

    with pytest.raises(NotFoundError):
        JobOfferService(db).get_owned_job_offer(job_offer.job_offer_id, other.company_id)


def test_list_company_job_offers_filters_by_status(make_job_offer, make_company, db):
    company = make_company()
    first = make_job_offer(company=company)
    second = make_job_offer(company=company)
    service = JobOfferService(db)
    service.cancel_job_offer(second.job_offer_id, company.company_id)

    all_offers = service.list_company_job_offers(company.company_id)
    open_offers = service.list_company_job_offers(company.company_id, JobStatus.open)

    assert {o.job_offer_id for o in all_offers} == {first.job_offer_id, second.job_offer_id}
    assert [o.job_offer_id for o in open_offers] == [first.job_offer_id]


def test_cancel_is_idempotent(make_job_offer, db):
    job_offer = make_job_offer()
    service = JobOfferService(db)

    service.cancel_job_offer(job_offer.job_offer_id, job_offer.company_id)
    cancelled = service.cancel_job_offer(job_offer.job_offer_id, job_offer.company_id)

    assert cancelled.job_status == JobStatus.cancelled.value


def test_cancel_completed_offer_fails(make_job_offer, db, settings):
    job_offer = make_job_offer(rounds=1)
    PipelineService(db, settings).complete_hiring(job_offer.job_offer_id, job_offer.company_id)

    with pytest.raises(InvalidStateError):
        JobOfferService(db).cancel_job_offer(job_offer.job_offer_id, job_offer.company_id)


def test_list_open_job_offers_hides_finished_offers(make_job_offer, make_company, db, settings):
    company = make_company(name="Initech")
    running = make_job_offer(company=company, title="Data Analyst")
    newest = make_job_offer(company=company, title="Platform Engineer")
    cancelled = make_job_offer(company=company)
    completed = make_job_offer(company=company, rounds=1)
    service = JobOfferService(db)
    service.cancel_job_offer(cancelled.job_offer_id, company.company_id)
    PipelineService(db, settings).complete_hiring(completed.job_offer_id, company.company_id)

    listing = service.list_open_job_offers()

    assert [job.job_offer_id for job in listing.jobs] == [newest.job_offer_id, running.job_offer_id]
    assert listing.total == 2
    assert {job.company_name for job in listing.jobs} == {"Initech"}


def test_list_open_job_offers_pages(make_job_offer, make_company, db):
    company = make_company()
    offers = [make_job_offer(company=company) for _ in range(3)]

    listing = JobOfferService(db).list_open_job_offers(page=2, page_size=2)

    assert [job.job_offer_id for job in listing.jobs] == [offers[0].job_offer_id]
    assert listing.total == 3
    assert (listing.page, listing.page_size) == (2, 2)
