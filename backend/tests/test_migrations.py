import pytest
from django.core.management import call_command


@pytest.mark.django_db
def test_accounts_models_match_migrations(settings):
    # --nomigrations hides the migration modules; put them back for the check
    settings.MIGRATION_MODULES = {}
    # exits non-zero when the user model has drifted from its migrations
    call_command("makemigrations", "accounts", "--check", "--dry-run", verbosity=0)
