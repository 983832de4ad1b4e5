"""
Module: estate_modules.debt.debt
Responsibility:
    The ``Debt`` aggregate: one liability of a deceased person's estate,
    its Section 45 priority, its payment history and its status lifecycle
    (payment, dispute, write-off, limitation, claim rejection).

Architecture position:
    Modules layer.  Imports estate_kernel and estate_engines only.
    Persistence and event publishing belong to the caller.

Invariants enforced:
    - Outstanding balance never goes below zero; an overpayment is clamped
      to the balance with a warning.
    - Status is SETTLED exactly when a payment (or an agreed dispute
      settlement) brings the balance to zero.
    - Payment history and audit notes are append-only.
    - A funeral/testamentary tier, once assigned, cannot be changed.
    - Every state change bumps the identity version and raises a
      ``DebtEvent``.
    - Status changes follow ``DEBT_LIFECYCLE_WORKFLOW``.

Failure modes:
    - Result.fail for invalid input (short descriptions and reasons,
      non-positive amounts, future dates, missing KRA PIN, disputed debt
      payments, forbidden write-offs).
    - DebtClosedError / StatuteBarredDebtError / PriorityTierLockedError
      when an operation would corrupt a closed or barred debt.

Audit relevance:
    Every mutation leaves an audit note with the acting party and the
    before/after status.
"""

from __future__ import annotations

import re
from datetime import date
from uuid import UUID

from estate_engines.debt_settlement import DebtClaim
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.identity import Identity
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money, add_years
from estate_kernel.exceptions import (
    DebtClosedError,
    PriorityTierLockedError,
    StatuteBarredDebtError,
)
from estate_kernel.logging_config import get_logger
from estate_modules.debt.config import DebtConfig
from estate_modules.debt.events import DebtEvent, DebtEventType
from estate_modules.debt.models import (
    AuditNote,
    CourtApproval,
    DebtStatus,
    DebtType,
    DisputeOutcome,
    DisputeRecord,
    KenyanTaxType,
    LiabilityTier,
    PaymentDetails,
    PaymentEligibility,
    PaymentRecord,
    Section45Compliance,
    VerificationStatus,
)
from estate_modules.debt.terms import DebtTerms
from estate_modules.debt.workflows import DEBT_LIFECYCLE_WORKFLOW

logger = get_logger("modules.debt")

# KRA PIN: A (individual) or P (non-individual), nine digits, check letter
KRA_PIN_PATTERN = re.compile(r"^[AP]\d{9}[A-Z]$")


class Debt:
    """
    Estate liability aggregate.

    Contract:
        Construct through ``Debt.create`` (or one of the typed factories).
        All state is read through properties; all changes go through the
        named operations below.
    Guarantees:
        - ``outstanding_balance`` >= 0 at all times.
        - ``payments`` and ``audit_notes`` only ever grow.
    Non-goals:
        - Does not persist itself or check the optimistic version; callers
          use ``identity.expect_version``.
    """

    def __init__(
        self,
        *,
        identity: Identity,
        estate_id: str,
        debt_type: DebtType,
        description: str,
        terms: DebtTerms,
        liability_tier: LiabilityTier,
        creditor_name: str,
        incurred_date: date,
        claimed_amount: Money,
        maximum_payable_amount: Money | None = None,
        tax_type: KenyanTaxType | None = None,
        kra_pin: str | None = None,
        tax_period: str | None = None,
        creditor_contact: str | None = None,
        creditor_account_number: str | None = None,
        secured_asset_id: str | None = None,
        requires_court_approval: bool = False,
        clock: Clock | None = None,
        config: DebtConfig | None = None,
    ):
        self._identity = identity
        self._estate_id = estate_id
        self._debt_type = debt_type
        self._description = description
        self._terms = terms
        self._liability_tier = liability_tier
        self._creditor_name = creditor_name
        self._incurred_date = incurred_date
        self._claimed_amount = claimed_amount
        self._maximum_payable_amount = maximum_payable_amount
        self._tax_type = tax_type
        self._kra_pin = kra_pin
        self._tax_period = tax_period
        self._creditor_contact = creditor_contact
        self._creditor_account_number = creditor_account_number
        self._secured_asset_id = secured_asset_id
        self._requires_court_approval = requires_court_approval
        self._clock = clock or SystemClock()
        self._config = config or DebtConfig.with_defaults()

        self._status = DebtStatus.OUTSTANDING
        self._verification_status = VerificationStatus.UNVERIFIED
        self._outstanding_balance = terms.principal
        self._total_paid = Money.zero(terms.principal.currency)
        self._payments: list[PaymentRecord] = []
        self._disputes: list[DisputeRecord] = []
        self._audit_notes: list[AuditNote] = []
        self._court_approval: CourtApproval | None = None
        self._statute_barred_on: date | None = None
        self._written_off_reason: str | None = None
        self._regulatory_approval_reference: str | None = None
        self._events: list[DebtEvent] = []

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        estate_id: str,
        debt_type: DebtType,
        description: str,
        principal: Money,
        creditor_name: str,
        incurred_date: date,
        terms: DebtTerms | None = None,
        liability_tier: LiabilityTier | None = None,
        claimed_amount: Money | None = None,
        maximum_payable_amount: Money | None = None,
        tax_type: KenyanTaxType | None = None,
        kra_pin: str | None = None,
        tax_period: str | None = None,
        creditor_contact: str | None = None,
        creditor_account_number: str | None = None,
        secured_asset_id: str | None = None,
        debt_id: UUID | None = None,
        clock: Clock | None = None,
        config: DebtConfig | None = None,
    ) -> Result[Debt]:
        """Validate and record a new liability.

        Every validation problem is reported; ``Result.error_message``
        joins them.  A tax debt without a tax period succeeds with a
        warning.
        """
        clock = clock or SystemClock()
        config = config or DebtConfig.with_defaults()
        errors: list[ValidationError] = []
        warnings: list[str] = []

        description = (description or "").strip()
        creditor_name = (creditor_name or "").strip()
        if len(description) < config.min_description_length:
            errors.append(ValidationError(
                "DESCRIPTION_TOO_SHORT",
                f"Debt description must be at least {config.min_description_length} characters",
                field="description",
            ))
        if not principal.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_PRINCIPAL", "Principal amount must be positive", field="principal",
            ))
        if not creditor_name:
            errors.append(ValidationError(
                "CREDITOR_REQUIRED", "Creditor name is required", field="creditor_name",
            ))
        if incurred_date > clock.today():
            errors.append(ValidationError(
                "FUTURE_INCURRED_DATE", "Incurred date cannot be in the future",
                field="incurred_date",
            ))

        if terms is None:
            terms = DebtTerms(principal=principal)
        elif terms.principal != principal:
            errors.append(ValidationError(
                "TERMS_PRINCIPAL_MISMATCH", "Terms principal differs from debt principal",
                field="terms",
            ))
        for label, money in (
            ("claimed_amount", claimed_amount),
            ("maximum_payable_amount", maximum_payable_amount),
        ):
            if money is not None and money.currency != principal.currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", f"{label} currency differs from principal currency",
                    field=label,
                ))

        is_tax = debt_type is DebtType.TAX_OBLIGATION or tax_type is not None
        pin = kra_pin.strip().upper() if kra_pin else None
        if is_tax:
            if tax_type is None:
                errors.append(ValidationError(
                    "TAX_TYPE_REQUIRED", "Tax type required for tax debts", field="tax_type",
                ))
            if not pin:
                errors.append(ValidationError(
                    "KRA_PIN_REQUIRED", "KRA PIN required for tax debts", field="kra_pin",
                ))
            if not tax_period:
                warnings.append("Tax period not specified for tax debt")
        if pin and not KRA_PIN_PATTERN.match(pin):
            errors.append(ValidationError(
                "INVALID_KRA_PIN", f"KRA PIN {pin} is not in the form A123456789B",
                field="kra_pin",
            ))

        tier = liability_tier or terms.liability_tier(debt_type)
        is_secured = terms.is_secured or tier is LiabilityTier.SECURED_DEBTS
        if is_secured and not secured_asset_id and not terms.security_details:
            errors.append(ValidationError(
                "SECURITY_REQUIRED",
                "Secured debts must be linked to an asset or carry security details",
                field="secured_asset_id",
            ))

        if errors:
            logger.warning("debt_create_rejected", extra={
                "estate_id": estate_id,
                "debt_type": debt_type.value,
                "codes": [e.code for e in errors],
            })
            return Result.fail(*errors, warnings=warnings)

        debt = cls(
            identity=Identity.new(debt_id),
            estate_id=estate_id,
            debt_type=debt_type,
            description=description,
            terms=terms,
            liability_tier=tier,
            creditor_name=creditor_name,
            incurred_date=incurred_date,
            claimed_amount=claimed_amount or principal,
            maximum_payable_amount=maximum_payable_amount,
            tax_type=tax_type,
            kra_pin=pin,
            tax_period=tax_period,
            creditor_contact=creditor_contact,
            creditor_account_number=creditor_account_number,
            secured_asset_id=secured_asset_id,
            requires_court_approval=(
                debt_type is DebtType.COURT_FINES or terms.requires_court_approval
            ),
            clock=clock,
            config=config,
        )
        debt._record_event(DebtEventType.RECORDED, {
            "debt_type": debt_type.value,
            "creditor_name": creditor_name,
            "principal": principal.to_record(),
            "liability_tier": tier.value,
            "priority_order": tier.order,
        }, bump=False)
        debt._note("system", f"Recorded {debt_type.value} of {principal} owed to {creditor_name}")

        logger.info("debt_created", extra={
            "debt_id": str(debt.id),
            "estate_id": estate_id,
            "debt_type": debt_type.value,
            "principal": str(principal.amount),
            "currency": principal.currency.code,
            "liability_tier": tier.value,
        })
        return Result.ok(debt, warnings=warnings)

    @classmethod
    def create_funeral_expense(
        cls,
        *,
        estate_id: str,
        description: str,
        amount: Money,
        creditor_name: str,
        incurred_date: date,
        clock: Clock | None = None,
        config: DebtConfig | None = None,
    ) -> Result[Debt]:
        return cls.create(
            estate_id=estate_id,
            debt_type=DebtType.FUNERAL_EXPENSE,
            description=description,
            principal=amount,
            creditor_name=creditor_name,
            incurred_date=incurred_date,
            clock=clock,
            config=config,
        )

    @classmethod
    def create_tax_debt(
        cls,
        *,
        estate_id: str,
        description: str,
        amount: Money,
        tax_type: KenyanTaxType,
        kra_pin: str | None,
        incurred_date: date,
        tax_period: str | None = None,
        clock: Clock | None = None,
        config: DebtConfig | None = None,
    ) -> Result[Debt]:
        config = config or DebtConfig.with_defaults()
        return cls.create(
            estate_id=estate_id,
            debt_type=DebtType.TAX_OBLIGATION,
            description=description,
            principal=amount,
            creditor_name=config.tax_creditor_name,
            incurred_date=incurred_date,
            tax_type=tax_type,
            kra_pin=kra_pin,
            tax_period=tax_period,
            clock=clock,
            config=config,
        )

    @classmethod
    def create_mortgage(
        cls,
        *,
        estate_id: str,
        description: str,
        terms: DebtTerms,
        lender_name: str,
        incurred_date: date,
        secured_asset_id: str,
        clock: Clock | None = None,
        config: DebtConfig | None = None,
    ) -> Result[Debt]:
        return cls.create(
            estate_id=estate_id,
            debt_type=DebtType.MORTGAGE,
            description=description,
            principal=terms.principal,
            creditor_name=lender_name,
            incurred_date=incurred_date,
            terms=terms,
            liability_tier=LiabilityTier.SECURED_DEBTS,
            secured_asset_id=secured_asset_id,
            clock=clock,
            config=config,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def id(self) -> UUID:
        return self._identity.id

    @property
    def version(self) -> int:
        return self._identity.version

    @property
    def estate_id(self) -> str:
        return self._estate_id

    @property
    def debt_type(self) -> DebtType:
        return self._debt_type

    @property
    def description(self) -> str:
        return self._description

    @property
    def terms(self) -> DebtTerms:
        return self._terms

    @property
    def principal(self) -> Money:
        return self._terms.principal

    @property
    def currency(self) -> str:
        return self._terms.principal.currency.code

    @property
    def outstanding_balance(self) -> Money:
        return self._outstanding_balance

    @property
    def total_paid(self) -> Money:
        return self._total_paid

    @property
    def claimed_amount(self) -> Money:
        return self._claimed_amount

    @property
    def maximum_payable_amount(self) -> Money | None:
        return self._maximum_payable_amount

    @property
    def liability_tier(self) -> LiabilityTier:
        return self._liability_tier

    @property
    def priority_order(self) -> int:
        return self._liability_tier.order

    @property
    def status(self) -> DebtStatus:
        return self._status

    @property
    def verification_status(self) -> VerificationStatus:
        return self._verification_status

    @property
    def creditor_name(self) -> str:
        return self._creditor_name

    @property
    def incurred_date(self) -> date:
        return self._incurred_date

    @property
    def tax_type(self) -> KenyanTaxType | None:
        return self._tax_type

    @property
    def kra_pin(self) -> str | None:
        return self._kra_pin

    @property
    def tax_period(self) -> str | None:
        return self._tax_period

    @property
    def secured_asset_id(self) -> str | None:
        return self._secured_asset_id

    @property
    def is_tax_debt(self) -> bool:
        return self._debt_type is DebtType.TAX_OBLIGATION or self._tax_type is not None

    @property
    def is_secured(self) -> bool:
        return self._terms.is_secured or self._liability_tier is LiabilityTier.SECURED_DEBTS

    @property
    def requires_court_approval(self) -> bool:
        return self._requires_court_approval

    @property
    def court_approval(self) -> CourtApproval | None:
        return self._court_approval

    @property
    def court_approval_obtained(self) -> bool:
        return self._court_approval is not None

    @property
    def is_disputed(self) -> bool:
        return self._status is DebtStatus.DISPUTED

    @property
    def current_dispute(self) -> DisputeRecord | None:
        if self._disputes and self._disputes[-1].is_open:
            return self._disputes[-1]
        return None

    @property
    def disputes(self) -> tuple[DisputeRecord, ...]:
        return tuple(self._disputes)

    @property
    def is_statute_barred(self) -> bool:
        return self._status is DebtStatus.STATUTE_BARRED

    @property
    def statute_barred_on(self) -> date | None:
        return self._statute_barred_on

    @property
    def payments(self) -> tuple[PaymentRecord, ...]:
        return tuple(self._payments)

    @property
    def audit_notes(self) -> tuple[AuditNote, ...]:
        return tuple(self._audit_notes)

    @property
    def priority_key(self) -> tuple[int, date, str]:
        """Sort key: S.45 tier, then oldest first."""
        return (self._liability_tier.order, self._incurred_date, str(self.id))

    @property
    def limitation_date(self) -> date:
        years = self._config.limitation_years(self.is_secured)
        return add_years(self._incurred_date, years)

    # ------------------------------------------------------------------
    # Internal update helpers
    # ------------------------------------------------------------------

    def _record_event(self, event_type: DebtEventType, payload: dict, bump: bool = True) -> None:
        if bump:
            self._identity = self._identity.bump()
        self._events.append(DebtEvent(
            event_type=event_type,
            debt_id=self.id,
            estate_id=self._estate_id,
            occurred_at=self._clock.now(),
            version=self._identity.version,
            payload=payload,
        ))

    def _note(self, actor: str, text: str) -> None:
        self._audit_notes.append(AuditNote(self._clock.now(), actor, text))

    def _change_status(self, action: str, new_status: DebtStatus) -> DebtStatus:
        previous = self._status
        DEBT_LIFECYCLE_WORKFLOW.require_transition(previous.value, action, new_status.value)
        self._status = new_status
        return previous

    def _raise_if_closed(self, operation: str) -> None:
        if self._status.is_closed:
            raise DebtClosedError(str(self.id), self._status.value, operation)

    def pull_events(self) -> list[DebtEvent]:
        """Return and clear the pending domain events."""
        events, self._events = self._events, []
        return events

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(self, amount: Money, details: PaymentDetails) -> Result[PaymentRecord]:
        """Apply a payment to the outstanding balance.

        Raises:
            DebtClosedError: the debt is settled, written off or rejected.
            StatuteBarredDebtError: the limitation period has elapsed.
        """
        self._raise_if_closed("record payment on")
        if self._status is DebtStatus.STATUTE_BARRED:
            raise StatuteBarredDebtError(
                str(self.id),
                self._statute_barred_on.isoformat() if self._statute_barred_on else None,
            )

        errors: list[ValidationError] = []
        if amount.currency != self.principal.currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH", "Payment currency differs from debt currency", field="amount",
            ))
        elif not amount.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_PAYMENT", "Payment amount must be positive", field="amount",
            ))
        if details.payment_date > self._clock.today():
            errors.append(ValidationError(
                "FUTURE_PAYMENT_DATE", "Payment date cannot be in the future", field="payment_date",
            ))
        if self._status is DebtStatus.DISPUTED:
            errors.append(ValidationError(
                "DEBT_DISPUTED", "Cannot record payment on a disputed debt", field="status",
            ))
        if errors:
            return Result.fail(*errors)

        warnings: list[str] = []
        applied = amount
        if amount > self._outstanding_balance:
            applied = self._outstanding_balance
            warnings.append(
                f"Payment of {amount} exceeds outstanding balance {self._outstanding_balance}; "
                f"applied {applied}"
            )

        balance_before = self._outstanding_balance
        self._outstanding_balance = self._outstanding_balance - applied
        self._total_paid = self._total_paid + applied
        # INVARIANT: balance strictly decreases on every accepted payment
        assert self._outstanding_balance < balance_before

        new_status = (
            DebtStatus.SETTLED if self._outstanding_balance.is_zero else DebtStatus.PARTIALLY_PAID
        )
        previous = self._change_status("record_payment", new_status)

        record = PaymentRecord(
            tendered=amount,
            applied=applied,
            payment_date=details.payment_date,
            method=details.method,
            balance_after=self._outstanding_balance,
            recorded_at=self._clock.now(),
            transaction_reference=details.transaction_reference,
            paid_by=details.paid_by,
        )
        self._payments.append(record)
        self._record_event(DebtEventType.PAYMENT_RECORDED, {
            "applied": applied.to_record(),
            "balance_after": self._outstanding_balance.to_record(),
            "previous_status": previous.value,
            "status": new_status.value,
        })
        if new_status is DebtStatus.SETTLED:
            self._record_event(DebtEventType.SETTLED, {
                "total_paid": self._total_paid.to_record(),
                "settled_on": details.payment_date.isoformat(),
            }, bump=False)
        self._note(details.paid_by or "system", f"Payment of {applied} via {details.method.value}")

        logger.info("debt_payment_recorded", extra={
            "debt_id": str(self.id),
            "applied": str(applied.amount),
            "balance_after": str(self._outstanding_balance.amount),
            "status": new_status.value,
            "clamped": record.was_clamped,
        })
        return Result.ok(record, warnings=warnings)

    # ------------------------------------------------------------------
    # Limitation
    # ------------------------------------------------------------------

    def check_statute_barred_status(self, as_of: date | None = None) -> bool:
        """Mark the debt statute-barred once the limitation period has passed.

        Barred strictly after the anniversary of the incurred date (12
        years for secured debts, 6 otherwise).  Closed debts are never
        barred.  Repeated calls are idempotent.
        """
        if self._status.is_closed:
            return False
        if self._status is DebtStatus.STATUTE_BARRED:
            return True
        as_of = as_of or self._clock.today()
        if as_of <= self.limitation_date:
            return False

        previous = self._change_status("bar", DebtStatus.STATUTE_BARRED)
        self._statute_barred_on = as_of
        self._record_event(DebtEventType.STATUTE_BARRED, {
            "previous_status": previous.value,
            "limitation_date": self.limitation_date.isoformat(),
            "barred_on": as_of.isoformat(),
        })
        self._note("system", f"Statute-barred: limitation period ended {self.limitation_date}")
        logger.info("debt_statute_barred", extra={
            "debt_id": str(self.id),
            "limitation_date": self.limitation_date.isoformat(),
            "previous_status": previous.value,
        })
        return True

    # ------------------------------------------------------------------
    # Write-off, rejection, verification
    # ------------------------------------------------------------------

    def write_off_debt(
        self,
        reason: str,
        authorized_by: str,
        regulatory_approval_reference: str | None = None,
    ) -> Result[Debt]:
        if self._status in (DebtStatus.SETTLED, DebtStatus.WRITTEN_OFF, DebtStatus.CLAIM_REJECTED):
            raise DebtClosedError(str(self.id), self._status.value, "write off")

        errors: list[ValidationError] = []
        reason = (reason or "").strip()
        if len(reason) < self._config.min_reason_length:
            errors.append(ValidationError(
                "REASON_TOO_SHORT",
                f"Write-off reason must be at least {self._config.min_reason_length} characters",
                field="reason",
            ))
        if not (authorized_by or "").strip():
            errors.append(ValidationError(
                "AUTHORIZATION_REQUIRED", "Write-off must name the authorizing party",
                field="authorized_by",
            ))
        if self._liability_tier is LiabilityTier.FUNERAL_EXPENSES:
            errors.append(ValidationError(
                "FUNERAL_EXPENSE_NOT_WAIVABLE",
                "Funeral expenses cannot be written off under S.45(a)",
                field="liability_tier",
            ))
        if self.is_tax_debt and not (regulatory_approval_reference or "").strip():
            errors.append(ValidationError(
                "KRA_APPROVAL_REQUIRED",
                "Tax debts cannot be written off without KRA approval",
                field="regulatory_approval_reference",
            ))
        if errors:
            return Result.fail(*errors)

        written_off = self._outstanding_balance
        previous = self._change_status("write_off", DebtStatus.WRITTEN_OFF)
        self._outstanding_balance = Money.zero(self.principal.currency)
        self._written_off_reason = reason
        self._regulatory_approval_reference = regulatory_approval_reference
        self._record_event(DebtEventType.WRITTEN_OFF, {
            "previous_status": previous.value,
            "written_off_amount": written_off.to_record(),
            "reason": reason,
            "authorized_by": authorized_by,
        })
        self._note(authorized_by, f"Written off {written_off}: {reason}")
        logger.info("debt_written_off", extra={
            "debt_id": str(self.id),
            "amount": str(written_off.amount),
            "previous_status": previous.value,
        })
        return Result.ok(self)

    def reject_claim(self, reason: str, rejected_by: str) -> Result[Debt]:
        """Reject the creditor's claim outright (e.g. unproven debt)."""
        self._raise_if_closed("reject claim on")
        reason = (reason or "").strip()
        if len(reason) < self._config.min_reason_length:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Rejection reason must be at least {self._config.min_reason_length} characters",
                field="reason",
            )
        if self._status is DebtStatus.DISPUTED:
            return Result.failure(
                "DEBT_DISPUTED", "Resolve the open dispute instead of rejecting the claim",
                field="status",
            )
        previous = self._change_status("reject_claim", DebtStatus.CLAIM_REJECTED)
        self._outstanding_balance = Money.zero(self.principal.currency)
        self._verification_status = VerificationStatus.REJECTED
        self._record_event(DebtEventType.STATUS_CHANGED, {
            "previous_status": previous.value,
            "status": DebtStatus.CLAIM_REJECTED.value,
            "reason": reason,
        })
        self._note(rejected_by, f"Claim rejected: {reason}")
        logger.info("debt_claim_rejected", extra={"debt_id": str(self.id)})
        return Result.ok(self)

    def verify(self, verified_by: str) -> Result[Debt]:
        if self._verification_status is not VerificationStatus.UNVERIFIED:
            return Result.failure(
                "ALREADY_VERIFIED",
                f"Debt verification is already {self._verification_status.value}",
                field="verification_status",
            )
        self._verification_status = VerificationStatus.VERIFIED
        self._record_event(DebtEventType.VERIFIED, {"verified_by": verified_by})
        self._note(verified_by, "Debt verified")
        return Result.ok(self)

    def obtain_court_approval(self, order_reference: str, approved_on: date) -> Result[Debt]:
        if not self._requires_court_approval:
            return Result.failure(
                "COURT_APPROVAL_NOT_REQUIRED", "This debt does not require court approval",
            )
        if self._court_approval is not None:
            return Result.failure("COURT_APPROVAL_EXISTS", "Court approval already obtained")
        if not (order_reference or "").strip():
            return Result.failure(
                "COURT_ORDER_REQUIRED", "Court order reference is required", field="order_reference",
            )
        if approved_on > self._clock.today():
            return Result.failure(
                "FUTURE_APPROVAL_DATE", "Approval date cannot be in the future", field="approved_on",
            )
        self._court_approval = CourtApproval(order_reference.strip(), approved_on)
        self._record_event(DebtEventType.COURT_APPROVAL_OBTAINED, {
            "order_reference": order_reference.strip(),
            "approved_on": approved_on.isoformat(),
        })
        self._note("court", f"Court approval {order_reference.strip()} recorded")
        return Result.ok(self)

    # ------------------------------------------------------------------
    # Disputes
    # ------------------------------------------------------------------

    def dispute_debt(self, reason: str, disputed_by: str) -> Result[Debt]:
        self._raise_if_closed("dispute")
        reason = (reason or "").strip()
        if self._status is DebtStatus.DISPUTED:
            return Result.failure("ALREADY_DISPUTED", "Debt is already disputed", field="status")
        if self._status is DebtStatus.STATUTE_BARRED:
            return Result.failure(
                "DEBT_STATUTE_BARRED", "A statute-barred debt cannot be disputed", field="status",
            )
        if len(reason) < self._config.min_reason_length:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Dispute reason must be at least {self._config.min_reason_length} characters",
                field="reason",
            )
        previous = self._change_status("dispute", DebtStatus.DISPUTED)
        self._disputes.append(DisputeRecord(
            reason=reason,
            disputed_by=disputed_by,
            disputed_at=self._clock.now(),
            previous_status=previous,
        ))
        self._record_event(DebtEventType.DISPUTED, {
            "previous_status": previous.value,
            "reason": reason,
            "disputed_by": disputed_by,
        })
        self._note(disputed_by, f"Disputed: {reason}")
        logger.info("debt_disputed", extra={"debt_id": str(self.id), "previous_status": previous.value})
        return Result.ok(self)

    def resolve_dispute(
        self,
        outcome: DisputeOutcome,
        resolution: str,
        resolved_by: str,
        settled_amount: Money | None = None,
    ) -> Result[Debt]:
        """Close the open dispute.

        UPHELD rejects the claim and zeroes the balance.  DISMISSED
        restores the status held before the dispute.  SETTLED replaces the
        balance with the agreed amount.
        """
        dispute = self.current_dispute
        if self._status is not DebtStatus.DISPUTED or dispute is None:
            return Result.failure("DEBT_NOT_DISPUTED", "Debt is not disputed", field="status")
        resolution = (resolution or "").strip()
        if len(resolution) < self._config.min_reason_length:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Resolution must be at least {self._config.min_reason_length} characters",
                field="resolution",
            )
        zero = Money.zero(self.principal.currency)

        if outcome is DisputeOutcome.UPHELD:
            new_status = DebtStatus.CLAIM_REJECTED
            new_balance = zero
        elif outcome is DisputeOutcome.DISMISSED:
            new_status = dispute.previous_status
            new_balance = self._outstanding_balance
        else:
            if settled_amount is None:
                return Result.failure(
                    "SETTLED_AMOUNT_REQUIRED", "A settled dispute requires the agreed amount",
                    field="settled_amount",
                )
            if settled_amount.currency != self.principal.currency:
                return Result.failure(
                    "CURRENCY_MISMATCH", "Settled amount currency differs from debt currency",
                    field="settled_amount",
                )
            if settled_amount > self._outstanding_balance:
                return Result.failure(
                    "SETTLED_AMOUNT_EXCEEDS_BALANCE",
                    f"Agreed amount {settled_amount} exceeds outstanding balance "
                    f"{self._outstanding_balance}",
                    field="settled_amount",
                )
            new_balance = settled_amount
            new_status = DebtStatus.SETTLED if settled_amount.is_zero else dispute.previous_status

        self._change_status("resolve_dispute", new_status)
        self._outstanding_balance = new_balance
        if new_status is DebtStatus.CLAIM_REJECTED:
            self._verification_status = VerificationStatus.REJECTED
        self._disputes[-1] = DisputeRecord(
            reason=dispute.reason,
            disputed_by=dispute.disputed_by,
            disputed_at=dispute.disputed_at,
            previous_status=dispute.previous_status,
            outcome=outcome,
            resolution=resolution,
            resolved_by=resolved_by,
            resolved_at=self._clock.now(),
            settled_amount=settled_amount,
        )
        self._record_event(DebtEventType.DISPUTE_RESOLVED, {
            "outcome": outcome.value,
            "status": new_status.value,
            "balance": new_balance.to_record(),
        })
        self._note(resolved_by, f"Dispute {outcome.value.lower()}: {resolution}")
        logger.info("debt_dispute_resolved", extra={
            "debt_id": str(self.id),
            "outcome": outcome.value,
            "status": new_status.value,
        })
        return Result.ok(self)

    # ------------------------------------------------------------------
    # Priority
    # ------------------------------------------------------------------

    def assign_liability_tier(self, tier: LiabilityTier, assigned_by: str = "system") -> Result[Debt]:
        """Reclassify the debt.

        Raises:
            PriorityTierLockedError: the debt holds the funeral tier.
        """
        if tier is self._liability_tier:
            return Result.ok(self)
        if self._liability_tier is LiabilityTier.FUNERAL_EXPENSES:
            raise PriorityTierLockedError(str(self.id), self._liability_tier.value, tier.value)
        self._raise_if_closed("reassign tier of")
        previous = self._liability_tier
        self._liability_tier = tier
        self._record_event(DebtEventType.TIER_ASSIGNED, {
            "previous_tier": previous.value,
            "tier": tier.value,
            "priority_order": tier.order,
        })
        self._note(assigned_by, f"Liability tier changed from {previous.value} to {tier.value}")
        logger.info("debt_tier_assigned", extra={
            "debt_id": str(self.id),
            "previous_tier": previous.value,
            "tier": tier.value,
        })
        return Result.ok(self)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def accrued_interest(self, as_of: date | None = None) -> Money:
        as_of = as_of or self._clock.today()
        return self._terms.accrued_interest(
            self._incurred_date, as_of, self._config.max_interest_multiple,
        )

    def payable_amount(self) -> Money:
        """Outstanding balance, capped by the maximum payable amount."""
        if self._maximum_payable_amount is None:
            return self._outstanding_balance
        headroom = self._maximum_payable_amount.subtract_or_zero(self._total_paid)
        return headroom if headroom < self._outstanding_balance else self._outstanding_balance

    def can_be_paid_from_estate(self) -> PaymentEligibility:
        blockers: list[str] = []
        if self._status is DebtStatus.SETTLED:
            blockers.append("Debt is already settled")
        if self._status is DebtStatus.WRITTEN_OFF:
            blockers.append("Debt has been written off")
        if self._status is DebtStatus.CLAIM_REJECTED:
            blockers.append("Claim has been rejected")
        if self._status is DebtStatus.STATUTE_BARRED:
            blockers.append("Debt is statute-barred")
        if self._status is DebtStatus.DISPUTED:
            blockers.append("Debt is under dispute")
        if self._requires_court_approval and self._court_approval is None:
            blockers.append("Requires court approval")
        if blockers:
            return PaymentEligibility(False, blockers[0], tuple(blockers))
        return PaymentEligibility(True)

    def section45_compliance(self) -> Section45Compliance:
        requirements: list[str] = []
        compliant = True
        tier = self._liability_tier
        if tier is LiabilityTier.FUNERAL_EXPENSES:
            requirements += [
                "Must be reasonable and customary",
                "Requires receipts for verification",
                "Priority over all other debts",
            ]
        elif tier is LiabilityTier.SECURED_DEBTS:
            requirements += [
                "Must have valid security documentation",
                "Asset-backed verification required",
            ]
            if not self._secured_asset_id:
                compliant = False
                requirements.append("Secured debts must be linked to an asset")
        elif tier is LiabilityTier.TAXES_RATES_WAGES:
            requirements += [
                "KRA tax clearance required for tax debts",
                "County government rates receipts",
                "Employee wage documentation for wage debts",
            ]
            if self.is_tax_debt and not self._kra_pin:
                compliant = False
                requirements.append("Tax debts require KRA PIN")
        return Section45Compliance(tier, tier.order, tuple(requirements), compliant)

    def legal_requirements(self) -> tuple[str, ...]:
        requirements: list[str] = []
        if self.is_secured:
            requirements.append("Security must be registered with relevant registry")
        if self.is_tax_debt:
            requirements.append("Must be verified with Kenya Revenue Authority")
            requirements.append("Tax clearance certificate required")
        if self._debt_type is DebtType.LAND_RATES:
            requirements.append("County government rates clearance certificate")
        if self._debt_type is DebtType.EMPLOYEE_WAGES:
            requirements.append("Employment records and wage statements")
            requirements.append("NSSF compliance certificate")
        if self._requires_court_approval and self._court_approval is None:
            requirements.append("Requires court approval before settlement")
        return tuple(requirements)

    def to_claim(self) -> DebtClaim:
        """Settlement claim for the amount the estate may still pay."""
        return DebtClaim(
            debt_id=str(self.id),
            tier_order=self._liability_tier.order,
            amount=self.payable_amount(),
            incurred_date=self._incurred_date,
            creditor_name=self._creditor_name,
        )

    def to_record(self) -> dict:
        return {
            "id": str(self.id),
            "version": self.version,
            "estate_id": self._estate_id,
            "debt_type": self._debt_type.value,
            "description": self._description,
            "creditor_name": self._creditor_name,
            "principal": self.principal.to_record(),
            "outstanding_balance": self._outstanding_balance.to_record(),
            "total_paid": self._total_paid.to_record(),
            "claimed_amount": self._claimed_amount.to_record(),
            "maximum_payable_amount": (
                self._maximum_payable_amount.to_record() if self._maximum_payable_amount else None
            ),
            "liability_tier": self._liability_tier.value,
            "priority_order": self.priority_order,
            "status": self._status.value,
            "verification_status": self._verification_status.value,
            "incurred_date": self._incurred_date.isoformat(),
            "tax_type": self._tax_type.value if self._tax_type else None,
            "kra_pin": self._kra_pin,
            "requires_court_approval": self._requires_court_approval,
            "court_approval_obtained": self.court_approval_obtained,
            "statute_barred_on": (
                self._statute_barred_on.isoformat() if self._statute_barred_on else None
            ),
            "payments": [p.to_record() for p in self._payments],
        }

    def __repr__(self) -> str:
        return (
            f"Debt({self.id}, {self._debt_type.value}, {self._outstanding_balance}, "
            f"{self._status.value})"
        )
