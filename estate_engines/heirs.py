"""
Heirs -- beneficiary snapshots and share records shared by the
Section 35 and Section 40 distribution calculators.

A child who died before the intestate but left issue is represented by
that issue: the child's share is computed as if the child survived and
then divided equally among the grandchildren (S.35(5) / S.41).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from estate_engines.allocation import AllocationEngine
from estate_kernel.domain.values import Money

MAJORITY_AGE = 18


class BeneficiaryRole(str, Enum):
    SPOUSE = "spouse"
    CHILD = "child"
    GRANDCHILD = "grandchild"
    DEPENDANT = "dependant"


@dataclass(frozen=True)
class SpouseInfo:
    spouse_id: str
    name: str
    age: int | None = None
    has_disability: bool = False


@dataclass(frozen=True)
class ChildInfo:
    """A child of the intestate; ``issue_ids`` lists a deceased child's own children."""

    child_id: str
    name: str
    age: int | None = None
    is_deceased: bool = False
    issue_ids: tuple[str, ...] = ()
    has_disability: bool = False

    @property
    def is_minor(self) -> bool:
        return not self.is_deceased and self.age is not None and self.age < MAJORITY_AGE

    @property
    def has_issue(self) -> bool:
        return bool(self.issue_ids)

    @property
    def takes_share(self) -> bool:
        """Living, or deceased but represented by issue."""
        return not self.is_deceased or self.has_issue

    @property
    def is_represented(self) -> bool:
        return self.is_deceased and self.has_issue


@dataclass(frozen=True)
class BeneficiaryShare:
    """
    One beneficiary's entitlement under a distribution.

    ``total_share`` is the sum of the chattels, residue and life-interest
    components.  For a represented child ``representation_shares`` divides
    ``total_share`` among the grandchildren.
    """

    beneficiary_id: str
    name: str
    role: BeneficiaryRole
    chattels_share: Money
    residue_share: Money
    life_interest_value: Money
    hotchpot_deduction: Money
    representation_shares: tuple[BeneficiaryShare, ...] = ()
    is_minor: bool = False
    notes: tuple[str, ...] = field(default=())

    @property
    def total_share(self) -> Money:
        return self.chattels_share + self.residue_share + self.life_interest_value

    def to_record(self) -> dict:
        return {
            "beneficiary_id": self.beneficiary_id,
            "name": self.name,
            "role": self.role.value,
            "chattels_share": self.chattels_share.to_record(),
            "residue_share": self.residue_share.to_record(),
            "life_interest_value": self.life_interest_value.to_record(),
            "hotchpot_deduction": self.hotchpot_deduction.to_record(),
            "total_share": self.total_share.to_record(),
            "is_minor": self.is_minor,
            "representation_shares": [s.to_record() for s in self.representation_shares],
            "notes": list(self.notes),
        }


def represent(
    child: ChildInfo,
    chattels: Money,
    residue: Money,
    allocator: AllocationEngine,
) -> tuple[BeneficiaryShare, ...]:
    """Divide a deceased child's share equally among the child's issue."""
    if not child.is_represented:
        return ()
    zero = Money.zero(residue.currency)
    chattel_parts = allocator.allocate_equal(chattels, child.issue_ids).as_dict()
    residue_parts = allocator.allocate_equal(residue, child.issue_ids).as_dict()
    return tuple(
        BeneficiaryShare(
            beneficiary_id=issue_id,
            name=f"Issue of {child.name}",
            role=BeneficiaryRole.GRANDCHILD,
            chattels_share=chattel_parts[issue_id],
            residue_share=residue_parts[issue_id],
            life_interest_value=zero,
            hotchpot_deduction=zero,
            notes=(f"Takes by representation of {child.child_id}",),
        )
        for issue_id in child.issue_ids
    )
