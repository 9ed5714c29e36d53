import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def fulfillment_bed():
    from fulfillment.domain import fulfillment
    from fulfillment.utils.db import drop_db, setup_db

    bed = DomainFixture(fulfillment)
    bed.setup()
    setup_db(fulfillment)
    yield bed
    drop_db(fulfillment)
    bed.teardown()


def _reset_infrastructure():
    from fulfillment.audit import reset_audit_sink
    from fulfillment.commerce import reset_commerce
    from fulfillment.notifier import reset_notifier
    from fulfillment.order.dispatch import reset_failure_counts, wait_for_side_effects
    from protean import current_domain

    # Let queued side effects land before the fakes they write to are dropped
    wait_for_side_effects(timeout=10)

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_commerce()
    reset_notifier()
    reset_audit_sink()
    reset_failure_counts()


@pytest.fixture(autouse=True)
def _ctx(fulfillment_bed):
    with fulfillment_bed.domain_context():
        yield
        _reset_infrastructure()


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------
@pytest.fixture()
def commerce():
    from fulfillment.commerce import get_commerce

    return get_commerce()


@pytest.fixture()
def notifier():
    from fulfillment.notifier import get_notifier

    return get_notifier()


@pytest.fixture()
def audit_sink():
    from fulfillment.audit import get_audit_sink

    return get_audit_sink()


# ---------------------------------------------------------------------------
# Staff and orders
# ---------------------------------------------------------------------------
def _register_staff(name="Asha Admin", email="asha@ops.example.com", role="admin"):
    from fulfillment.staff.management import RegisterStaff
    from protean import current_domain

    return current_domain.process(RegisterStaff(name=name, email=email, role=role), asynchronous=False)


def _create_order(commerce_order_id="co-1001", **overrides):
    from fulfillment.order.creation import CreateFulfillmentOrder
    from protean import current_domain

    values = {
        "commerce_order_id": commerce_order_id,
        "user_id": "merchant-1",
        "store_id": "store-1",
        "store_name": "Acme Store",
        "order_name": "#1001",
        "customer_name": "Ravi Kumar",
        "customer_email": "ravi@example.com",
        "sku": "TSHIRT-BLK-M",
        "order_value": 10000,
        "product_cost": 4000,
        "shipping_cost": 500,
        "service_fee": 300,
        "wallet_deducted_amount": 4800,
    }
    values.update(overrides)
    return current_domain.process(CreateFulfillmentOrder(**values), asynchronous=False)


@pytest.fixture()
def admin_id():
    return _register_staff()


@pytest.fixture()
def picker_id():
    return _register_staff(name="Pooja Picker", email="pooja@ops.example.com", role="picker")


@pytest.fixture()
def packer_id():
    return _register_staff(name="Karan Packer", email="karan@ops.example.com", role="packer")


@pytest.fixture()
def order_id():
    return _create_order()


@pytest.fixture()
def make_order():
    """Factory for fulfillment orders; keyword arguments override the defaults."""
    return _create_order


@pytest.fixture()
def make_staff():
    return _register_staff
