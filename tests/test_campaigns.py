import pytest

from notifier.modules.bookings.models import Business, Customer
from notifier.modules.campaigns.schemas import CampaignCreate
from notifier.modules.campaigns.service import CampaignService, compose_campaign_message
from notifier.modules.consent.models import SmsOptOut

SITE = "site-a"


@pytest.fixture
def campaigns(session_factory, dispatcher) -> CampaignService:
    return CampaignService(session_factory, dispatcher, concurrency=1)


def test_compose_campaign_message():
    assert compose_campaign_message("Hi {{customer_name}}, 20% off!", "Circle Boats", "Jane", "SUMMER") == (
        "[Circle Boats] Hi Jane, 20% off!\n\nUse code SUMMER at checkout!\n\nReply STOP to unsubscribe."
    )
    assert compose_campaign_message("Hi {{customer_name}}", "Circle Boats", None, None) == (
        "[Circle Boats] Hi there\n\nReply STOP to unsubscribe."
    )


async def test_message_required(campaigns):
    with pytest.raises(ValueError, match="message_required"):
        await campaigns.create(SITE, CampaignCreate(message=""))


async def test_no_recipients(campaigns, seed):
    await seed(Customer(site_id=SITE, name="No Phone", phone=None))
    with pytest.raises(ValueError, match="no_recipients"):
        await campaigns.create(SITE, CampaignCreate(message="hi"))


async def test_audience_filters(campaigns, seed):
    await seed(
        Customer(site_id=SITE, name="New", phone="2055550001", total_bookings=0),
        Customer(site_id=SITE, name="Regular", phone="2055550002", total_bookings=1),
        Customer(site_id=SITE, name="Loyal", phone="2055550003", total_bookings=5),
        Customer(site_id="site-b", name="Elsewhere", phone="2055550004", total_bookings=5),
    )

    vip = await campaigns.create(SITE, CampaignCreate(audience="vip", message="hi"))
    inactive = await campaigns.create(SITE, CampaignCreate(audience="inactive", message="hi"))
    everyone = await campaigns.create(SITE, CampaignCreate(audience="all", message="hi"))

    assert [r.name for r in vip.recipients] == ["Loyal"]
    assert [r.name for r in inactive.recipients] == ["New"]
    assert sorted(r.name for r in everyone.recipients) == ["Loyal", "New", "Regular"]


async def test_run_sends_and_counts(campaigns, carrier, seed, sms_logs):
    await seed(
        Business(site_id=SITE, name="Circle Boats"),
        Customer(site_id=SITE, name="Jane", phone="2055550001"),
        Customer(site_id=SITE, name="Opted Out", phone="2055550002"),
        Customer(site_id=SITE, name="Bad Number", phone="555-1212"),
        SmsOptOut(phone="+12055550002", site_id=None),
    )
    plan = await campaigns.create(SITE, CampaignCreate(message="Hi {{customer_name}}!", coupon_code="SUMMER"))

    campaign = await campaigns.run(SITE, plan)

    assert campaign.status == "completed"
    assert campaign.recipient_count == 3
    assert campaign.sent_count == 1
    assert campaign.failed_count == 2
    [call] = carrier.calls
    assert call["to"] == "+12055550001"
    assert call["body"].startswith("[Circle Boats] Hi Jane!")

    rows = await sms_logs(SITE)
    assert sorted(r.status for r in rows) == ["invalid_phone", "opted_out", "sent"]
    assert {r.type for r in rows} == {"campaign"}
    assert {r.related_id for r in rows} == {str(plan.campaign_id)}

    [stored] = await campaigns.list(SITE)
    assert stored.id == plan.campaign_id
    assert stored.sent_count == 1
