# apps/growth/repository.py
import logging

from apps.trading.quarters import month_number
from apps.users.errors import RepoError, require_user, store_errors

from .models import GrowthAccount
from .serializers import GrowthAccountSerializer

logger = logging.getLogger(__name__)


class GrowthRepoError(RepoError):
    pass


def _sort_key(account):
    return (-account.year, account.quarter, month_number(account.month))


def list_accounts(user, year=None, quarter=None, account_name=None):
    """Rows ordered by year (newest first), quarter, then calendar month."""
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "List growth accounts"):
        qs = GrowthAccount.objects.filter(user=user)
        if year is not None:
            qs = qs.filter(year=year)
        if quarter is not None:
            qs = qs.filter(quarter=quarter)
        if account_name:
            qs = qs.filter(account_name=account_name)
        accounts = sorted(qs, key=_sort_key)

    return GrowthAccountSerializer(accounts, many=True).data


def account_names(user, year=None):
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "List account names"):
        qs = GrowthAccount.objects.filter(user=user)
        if year is not None:
            qs = qs.filter(year=year)
        return sorted(set(qs.values_list("account_name", flat=True)))


def available_years(user):
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "List growth years"):
        years = GrowthAccount.objects.filter(user=user).values_list("year", flat=True)
        return sorted(set(years), reverse=True)


def create_account(user, data):
    """``data`` is already validated (see GrowthAccountSerializer)."""
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "Create growth account"):
        account = GrowthAccount.objects.create(user=user, **data)

    logger.info(f"Growth account {account.account_name} {account.month} {account.year} created for {user}")
    return GrowthAccountSerializer(account).data


def update_account(user, account_id, data):
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "Update growth account"):
        account = GrowthAccount.objects.get(user=user, id=account_id)
        for field, value in data.items():
            setattr(account, field, value)
        account.save()

    return GrowthAccountSerializer(account).data


def get_account(user, account_id):
    require_user(user, GrowthRepoError)
    with store_errors(GrowthRepoError, "Get growth account"):
        return GrowthAccount.objects.get(user=user, id=account_id)


def delete_account(user, account_id):
    require_user(user, GrowthRepoError)

    with store_errors(GrowthRepoError, "Delete growth account"):
        deleted, _ = GrowthAccount.objects.filter(user=user, id=account_id).delete()

    if not deleted:
        raise GrowthAccount.DoesNotExist(f"Growth account {account_id} not found")
