# import all models for Alembic
from workshop.db.models.user import User, Profile, Role
from workshop.db.models.checklist import Checklist, ChecklistItem, ChecklistStatus
from workshop.db.models.budget import Budget, BudgetItem, BudgetStatus
from workshop.db.models.public_link import PublicLink

RESOURCE_MODELS = {
    Checklist.resource_type: Checklist,
    Budget.resource_type: Budget,
}
