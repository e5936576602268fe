import os
from assetvault import create_app
from assetvault.bootstrap import run_auto_migrate

app = create_app()

if os.getenv("AUTO_MIGRATE", "").lower() in ("1", "true", "yes"):
    run_auto_migrate(app)
