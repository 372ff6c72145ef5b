#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# replace slack verboticons with background-filled copies
# -----------------------------------------------------------------------------
# 1. Put SLACK_ACCESS_TOKEN, SLACK_WORKSPACE and SLACK_USER_TOKEN into .env
# 2. Check it first: DRY_RUN=1 verbotifier
# 3. Launch without arguments to scan the whole workspace, or pass emoji
#    names to replace exactly those:  verbotifier thumbsup-verbo wave-verbo
# -----------------------------------------------------------------------------
from __future__ import annotations

import locale
from argparse import ArgumentParser, Namespace
from typing import Callable, List

from verbotifier.asset_cache import AssetCache
from verbotifier.compositor import BackgroundCompositor
from verbotifier.core.config import Config
from verbotifier.core.errors import VerbotifierError
from verbotifier.core.exception_handler import ExceptionHandler
from verbotifier.core.external_tool import ExternalTool
from verbotifier.core.logger import Logger
from verbotifier.core.progress_renderer import ProgressRenderer
from verbotifier.core.slack_client import SlackClient
from verbotifier.emoji_catalog import EmojiSet, EmojiRegular, EmojiAlias
from verbotifier.image_classifier import ImageClassifier
from verbotifier.workspace_mutator import WorkspaceMutator, AliasRestoreError


def prompt_confirmation(question: str) -> bool:
    try:
        answer = input(f'{question} [y/N] ')
    except EOFError:
        return False
    return answer.strip().lower() in ('y', 'yes')


class ItemResult:
    def __init__(self, emoji: EmojiRegular):
        self.emoji: EmojiRegular = emoji
        self.output_path: str|None = None
        self.aliases_restored: List[EmojiAlias] = []
        self.error: Exception|None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PipelineReport:
    OUTCOME_NOTHING_TO_DO = 'nothing to do'
    OUTCOME_DRY_RUN = 'dry run'
    OUTCOME_DECLINED = 'declined'
    OUTCOME_DONE = 'done'

    def __init__(self):
        self.outcome: str|None = None
        self.selected: List[EmojiRegular] = []
        self.results: List[ItemResult] = []

    @property
    def failed(self) -> List[ItemResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class Pipeline:
    """
    Load -> Download -> Select -> (Confirm) -> Composite -> Mutate.

    Every stage up to compositing is fatal on error. Mutation errors are
    isolated per emoji and collected in the report.
    """
    def __init__(self,
                 config: Config,
                 client: SlackClient,
                 asset_cache: AssetCache,
                 classifier: ImageClassifier,
                 compositor: BackgroundCompositor,
                 mutator: WorkspaceMutator,
                 confirm_fn: Callable[[str], bool] = prompt_confirmation):
        self._logger: Logger = Logger.get_instance()
        self._renderer: ProgressRenderer = ProgressRenderer.get_instance()
        self._config = config
        self._client = client
        self._asset_cache = asset_cache
        self._classifier = classifier
        self._compositor = compositor
        self._mutator = mutator
        self._confirm_fn = confirm_fn

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> Pipeline:
        client = SlackClient(config.workspace, config.access_token, config.user_token)
        return cls(
            config,
            client,
            AssetCache(client, config.cache_dir),
            ImageClassifier(ExternalTool(config.inspect_cmd)),
            BackgroundCompositor(ExternalTool(config.composite_cmd), config.background_path, config.output_dir),
            WorkspaceMutator(client),
            **kwargs,
        )

    def run(self, names: List[str]|None = None) -> PipelineReport:
        report = PipelineReport()

        emoji_set = EmojiSet.fetch(self._client, self._config.cache_dir)
        self._asset_cache.ensure_all(emoji_set.regulars)

        report.selected = self._select(emoji_set, names or [])
        if not report.selected:
            self._logger.info('No verboticons found, nothing to do')
            report.outcome = PipelineReport.OUTCOME_NOTHING_TO_DO
            return report

        self._report_selection(report.selected)
        if self._config.dry_run:
            self._logger.info('Dry run, stopping before any changes')
            report.outcome = PipelineReport.OUTCOME_DRY_RUN
            return report

        if not self._confirm_fn(f'Replace {len(report.selected):n} emoji in "{self._config.workspace}" workspace?'):
            self._logger.info('Cancelled, workspace is unchanged')
            report.outcome = PipelineReport.OUTCOME_DECLINED
            return report

        report.results = [ItemResult(emoji) for emoji in report.selected]
        self._composite(report.results)
        self._mutate(report.results, emoji_set)
        report.outcome = PipelineReport.OUTCOME_DONE
        return report

    def _select(self, emoji_set: EmojiSet, names: List[str]) -> List[EmojiRegular]:
        if names:
            self._logger.info(f'Using {len(names):n} explicitly named emoji, classification skipped')
            return emoji_set.select_by_names(names)
        return self._classifier.select_verboticons(emoji_set.regulars)

    def _report_selection(self, selected: List[EmojiRegular]):
        self._logger.info(f'Selected {len(selected):n} emoji:')
        for emoji in selected:
            self._logger.info(f'  :{emoji.name}:')

    def _composite(self, results: List[ItemResult]):
        self._renderer.before_batch('Compositing', len(results))
        for result in results:
            result.output_path = self._compositor.apply(result.emoji)
            self._renderer.on_item_completion(result.emoji.name, ProgressRenderer.STATUS_OK)
        self._renderer.after_batch()

    def _mutate(self, results: List[ItemResult], emoji_set: EmojiSet):
        self._renderer.before_batch('Replacing', len(results))
        for result in results:
            try:
                result.aliases_restored = self._mutator.replace(result.emoji, result.output_path, emoji_set)
            except VerbotifierError as e:
                result.error = e
                if isinstance(e, AliasRestoreError):
                    result.aliases_restored = e.restored
                self._logger.error(f'Replacing :{result.emoji.name}: failed: {e!s}', silent=True)
                self._renderer.on_item_completion(result.emoji.name, ProgressRenderer.STATUS_FAIL, str(e))
                continue

            msg = ''
            if result.aliases_restored:
                msg = 'aliases: ' + ', '.join(a.name for a in result.aliases_restored)
            self._renderer.on_item_completion(result.emoji.name, ProgressRenderer.STATUS_OK, msg)
        self._renderer.after_batch()


# noinspection PyMethodMayBeStatic
class EmojiVerbotifier:
    ENV_FILE = '.env'

    def __init__(self):
        locale.setlocale(locale.LC_ALL, '')
        self.logger = Logger.get_instance()
        self.args: Namespace

    def run(self):
        _handler = ExceptionHandler()
        try:
            self._invoke()
        except Exception as e:
            _handler.handle(e)
        print()

    def _parse_args(self, argv: List[str]|None = None) -> Namespace:
        parser = ArgumentParser(
            description='Put a background under Slack verboticons and re-upload them, keeping aliases',
        )
        parser.add_argument('names', metavar='<name>', nargs='*',
                            help='emoji to replace; if omitted, verboticons are detected automatically')
        parser.add_argument('--dry-run', action='store_true',
                            help='only report selected emoji (same as DRY_RUN=1)')
        parser.add_argument('-y', '--yes', action='store_true',
                            help='do not ask for confirmation')
        return parser.parse_args(argv)

    def _invoke(self, argv: List[str]|None = None):
        self.args = self._parse_args(argv)
        config = Config.from_env(env_file=self.ENV_FILE)
        if self.args.dry_run:
            config.dry_run = True
        self.logger.debug(f'Starting with {config!r}')

        kwargs = {}
        if self.args.yes:
            kwargs['confirm_fn'] = lambda question: True
        report = Pipeline.from_config(config, **kwargs).run(self.args.names)

        if report.outcome == PipelineReport.OUTCOME_DONE:
            self.logger.info(f'Replaced {len(report.results) - len(report.failed):n} '
                             f'of {len(report.results):n} emoji')
        if not report.ok:
            raise VerbotifierError('Failed: ' + ', '.join(r.emoji.name for r in report.failed))


def main():
    EmojiVerbotifier().run()


if __name__ == '__main__':
    main()
