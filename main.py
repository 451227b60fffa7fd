import logging
import json
import os
import sys
import argparse

from core.app_context import AppContext
from core.assessment.question_bank import load_question_file
from core.config_loader import load_config, get_project_root
from core.errors import ServiceException
from database.database import get_engine
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path) or os.path.exists(path):
        return path
    return os.path.join(get_project_root(), path)


def cmd_init_db(config, args) -> int:
    init_db(get_engine(config.database.url))
    return 0


def cmd_seed_questions(config, args) -> int:
    path = _resolve_path(args.file or config.assessment.question_bank_file)
    specs = load_question_file(path)
    logger.info(f"Loaded {len(specs)} valid questions from {path}")

    ctx = AppContext.build(config)
    inserted = ctx.assessment_service.seed_questions(specs)
    for question_id in args.deactivate or []:
        ctx.assessment_service.set_question_active(question_id, False)
    logger.info(f"Seeding complete: {inserted} inserted, {len(args.deactivate or [])} deactivated")
    return 0


def cmd_run_matching(config, args) -> int:
    ctx = AppContext.build(config)
    result = ctx.matching_service.run_matching(args.user_id)
    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0


def cmd_serve(config, args) -> int:
    from web.backend.app import main as serve
    serve()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Co-founder matching engine")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml (defaults to the repo root copy)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')

    seed = subparsers.add_parser('seed-questions', help='Load the assessment question catalog')
    seed.add_argument('--file', type=str, default=None,
                      help='YAML catalog (defaults to assessment.question_bank_file)')
    seed.add_argument('--deactivate', type=str, nargs='*', default=None,
                      help='Question ids to retire from future sessions')

    run = subparsers.add_parser('run-matching', help='Run matching for one user')
    run.add_argument('user_id', type=str)

    subparsers.add_parser('serve', help='Start the HTTP API')

    args = parser.parse_args(argv)
    config = load_config(args.config)

    commands = {
        'init-db': cmd_init_db,
        'seed-questions': cmd_seed_questions,
        'run-matching': cmd_run_matching,
        'serve': cmd_serve,
    }

    try:
        return commands[args.command](config, args)
    except ServiceException as e:
        logger.error(f"{args.command} failed: {e.__class__.__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
