"""Mixed storefront workload scenario.

Combines the checkout journeys with weights that model a typical day:
most checkouts succeed, some payments are declined, and a few clients
retry verification.
"""

from locust import HttpUser, between

from loadtests.scenarios.checkout import (
    CheckoutSuccessJourney,
    DeclinedPaymentJourney,
    RetriedVerificationJourney,
)


class MixedWorkloadUser(HttpUser):
    wait_time = between(0.5, 3.0)
    tasks = {
        CheckoutSuccessJourney: 7,
        DeclinedPaymentJourney: 2,
        RetriedVerificationJourney: 1,
    }
