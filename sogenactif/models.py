from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field

CADDIE_MAX_LENGTH = 2048
_CENT = Decimal("0.01")


class Customer(BaseModel):
    """Customer attributes that can be transmitted to the payment server."""

    # Passed to the payment server and sent back after a successful
    # or cancelled payment
    id: str = ""
    # Free field sent back unmodified after a successful payment
    caddie: str = Field(default="", max_length=CADDIE_MAX_LENGTH)
    # Per-customer overrides of the configured cancel and return URLs
    cancel_url: Optional[str] = None
    return_url: Optional[str] = None


class Transaction(BaseModel):
    customer: Customer
    amount: Decimal = Field(gt=0)

    @property
    def cents(self) -> int:
        return int((self.amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def new_transaction(
    customer: Optional[Customer], amount: Union[Decimal, float, str]
) -> Optional[Transaction]:
    """Create a transaction to checkout.

    A missing customer or a null amount returns None.
    """
    value = Decimal(str(amount))
    if customer is None or value == 0:
        return None
    return Transaction(customer=customer, amount=value)


class Payment(BaseModel):
    """Data filled (and returned) by the secure payment server."""

    # Generally 0 followed by the SIRET number
    merchant_id: str
    merchant_country: str
    amount: Decimal
    transaction_id: str
    # Payment mean chosen by the customer
    payment_means: str
    transmission_date: datetime
    payment_date: datetime
    response_code: str
    payment_certificate: str
    authorization_id: str
    currency_code: str
    card_number: str
    cvv_flag: str
    cvv_response_code: str
    bank_response_code: str
    complementary_code: str
    complementary_info: str
    # Customer's buying context, sent back unmodified
    return_context: str
    caddie: str
    receipt_complement: str
    merchant_language: str
    language: str
    customer_id: str
    customer_email: str
    customer_ip_address: str
    capture_day: str
    capture_mode: str
    data: str
    order_validity: str
    score_value: str
    score_color: str
    score_info: str
    score_threshold: str
    score_profile: str

    @property
    def accepted(self) -> bool:
        return self.response_code == "00"

    def report(self) -> str:
        rule, thin = "=" * 40, "-" * 40
        lines = [
            rule,
            f"Merchant ID: {self.merchant_id}",
            f"Merchant Country: {self.merchant_country}",
            f"Amount: {self.amount:.2f}",
            f"Transaction ID: {self.transaction_id}",
            f"Payment Means: {self.payment_means}",
            thin,
            f"Transmission Date: {self.transmission_date.isoformat()}",
            f"Payment Date: {self.payment_date.isoformat()}",
            f"Response Code: {self.response_code}",
            f"Payment Certificate: {self.payment_certificate}",
            thin,
            f"Authorization ID: {self.authorization_id}",
            f"Currency Code: {self.currency_code}",
            f"Card Number: {self.card_number}",
            f"CVV Flag: {self.cvv_flag}",
            f"CVV Response Code: {self.cvv_response_code}",
            f"Bank Response Code: {self.bank_response_code}",
            f"Complementary Code: {self.complementary_code}",
            f"Complementary Info: {self.complementary_info}",
            thin,
            f"Return Context: {self.return_context}",
            f"Caddie: {self.caddie}",
            f"Receipt Complement: {self.receipt_complement}",
            f"Merchant Language: {self.merchant_language}",
            f"Language: {self.language}",
            thin,
            f"Customer ID: {self.customer_id}",
            f"Customer Email: {self.customer_email}",
            f"Customer IP Address: {self.customer_ip_address}",
            thin,
            f"Capture Day: {self.capture_day}",
            f"Capture Mode: {self.capture_mode}",
            f"Data: {self.data}",
            f"Order Validity: {self.order_validity}",
            thin,
            f"Score Value: {self.score_value}",
            f"Score Color: {self.score_color}",
            f"Score Info: {self.score_info}",
            f"Score Threshold: {self.score_threshold}",
            f"Score Profile: {self.score_profile}",
        ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.report()
