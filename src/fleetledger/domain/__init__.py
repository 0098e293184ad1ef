"""Domain layer for fleetledger application."""

# Import services lazily to avoid circular dependencies with utils and database

_SERVICES = {
    "SequenceCounter": "fleetledger.domain.sequence",
    "FolioService": "fleetledger.domain.sequence",
    "RecurringChargeGenerator": "fleetledger.domain.charges",
    "RentalChargeService": "fleetledger.domain.charges",
    "StartDatePolicy": "fleetledger.domain.charges",
    "CommissionReconciler": "fleetledger.domain.commission",
    "CommissionMigrationService": "fleetledger.domain.commission",
    "FieldUnifier": "fleetledger.domain.unification",
    "UnificationService": "fleetledger.domain.unification",
    "TechnicianAssignmentService": "fleetledger.domain.assignments",
    "BatchWriter": "fleetledger.domain.batch",
    "RunSummary": "fleetledger.domain.summary",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
