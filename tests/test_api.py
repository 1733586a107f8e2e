from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

import api
from database import init_db
from exceptions import MissingWebsiteError, TargetNotFoundError
from generator import BrandOverviewGenerator
from models import OverviewStatus, Target
from schema import empty_crawl_result


@pytest.fixture
def session_factory():
    return init_db('sqlite://')


@pytest.fixture
def generator(session_factory):
    crawler = MagicMock()
    crawler.crawl.return_value = empty_crawl_result("https://acme.com")
    summarizer = MagicMock()
    summarizer.structure_profile.return_value = {"name": "Acme"}
    summarizer.render_markdown.return_value = "# Acme Brand Overview"
    return BrandOverviewGenerator(session_factory=session_factory, summarizer=summarizer, crawler=crawler)


def add_target(session_factory, website_url="https://acme.com"):
    with session_factory() as session:
        target = Target(name="Acme", website_url=website_url)
        session.add(target)
        session.commit()
        return target.id


def test_get_overview_before_generation(generator, session_factory):
    target_id = add_target(session_factory)

    assert api.get_overview(target_id, generator=generator) is None


def test_generate_synchronously(generator, session_factory):
    target_id = add_target(session_factory)

    response = api.generate(target_id, background=False, generator=generator)

    assert response['status'] == 'COMPLETE'
    assert response['data']['summary'] == "# Acme Brand Overview"
    overview = api.get_overview(target_id, generator=generator)
    assert overview['status'] == 'COMPLETE'
    assert overview['target_id'] == target_id


def test_generate_again_without_force_reports_existing(generator, session_factory):
    target_id = add_target(session_factory)
    api.generate(target_id, background=False, generator=generator)

    response = api.generate(target_id, background=False, generator=generator)

    assert response['status'] == 'COMPLETE'
    assert response['message'] == 'Brand overview already exists. Use force=True to regenerate.'
    assert generator.crawler.crawl.call_count == 1


def test_generate_while_running_reports_in_progress(generator, session_factory):
    target_id = add_target(session_factory)
    generator.claim(target_id, "https://acme.com")

    response = api.generate(target_id, force=True, generator=generator)

    assert response['status'] == 'RUNNING'
    assert response['message'] == 'Generation already in progress'


def test_generate_in_background_starts_worker(generator, session_factory):
    target_id = add_target(session_factory)

    with patch('api.threading.Thread') as thread:
        response = api.generate(target_id, generator=generator)

    assert response['status'] == OverviewStatus.RUNNING.value
    assert response['data']['status'] == 'RUNNING'
    kwargs = thread.call_args.kwargs
    assert kwargs['target'] == generator.run
    assert kwargs['daemon'] is True
    thread.return_value.start.assert_called_once()
    generator.crawler.crawl.assert_not_called()


def test_generate_unknown_target(generator):
    with pytest.raises(TargetNotFoundError):
        api.generate("missing", generator=generator)


def test_generate_target_without_website(generator, session_factory):
    target_id = add_target(session_factory, website_url=None)

    with pytest.raises(MissingWebsiteError):
        api.generate(target_id, generator=generator)


def test_generate_reports_failure_when_claim_hits_database_error(generator, session_factory):
    target_id = add_target(session_factory)
    generator.claim = MagicMock(side_effect=OperationalError("UPDATE", {}, Exception("locked")))

    response = api.generate(target_id, generator=generator)

    assert response == {
        'status': 'FAILED',
        'message': 'Failed to initialize brand overview generation',
        'data': None,
    }
    generator.crawler.crawl.assert_not_called()
