"""
Content Manager for Bluffdict

Handles loading and validation of the YAML word corpus. Every entry carries
a word and its real definition in each supported language.
"""

import yaml
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

LANGUAGES = ('en', 'es')


@dataclass(frozen=True)
class WordText:
    """A word and its real definition in one language."""
    word: str
    definition: str


@dataclass(frozen=True)
class WordEntry:
    """Data structure for one corpus entry."""
    id: str
    en: WordText
    es: WordText

    def for_language(self, lang: str) -> WordText:
        """Project the entry to a language, falling back to English."""
        if lang == 'es':
            return self.es
        return self.en

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'en': {'word': self.en.word, 'definition': self.en.definition},
            'es': {'word': self.es.word, 'definition': self.es.definition},
        }


class ContentValidationError(Exception):
    """Raised when YAML content validation fails."""
    pass


class ContentManager:
    """Manages loading and validation of the word corpus from YAML files."""

    def __init__(self, yaml_file_path: str = "words.yaml"):
        """
        Initialize ContentManager with path to YAML file.

        Args:
            yaml_file_path: Path to the YAML file containing the words
        """
        self.yaml_file_path = yaml_file_path
        self.words: List[WordEntry] = []
        self._by_id: Dict[str, WordEntry] = {}
        self._loaded = False

    def load_words_from_yaml(self) -> None:
        """
        Load the word corpus from the YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ContentValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)

            self.load_words_from_data(data)
            logger.info(f"Successfully loaded {len(self.words)} words from {self.yaml_file_path}")

        except FileNotFoundError:
            logger.error(f"YAML file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except ContentValidationError as e:
            logger.error(f"Content validation error: {e}")
            raise

    def load_words_from_data(self, data: Any) -> None:
        """Validate and load already parsed corpus data."""
        self.validate_yaml_structure(data)
        self.words = self._parse_words(data)
        self._by_id = {entry.id: entry for entry in self.words}
        self._loaded = True

    def validate_yaml_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Args:
            data: Parsed YAML data to validate

        Raises:
            ContentValidationError: If structure is invalid
        """
        if not isinstance(data, dict):
            raise ContentValidationError("YAML root must be a dictionary")

        if 'words' not in data:
            raise ContentValidationError("YAML must contain 'words' key")

        words = data['words']
        if not isinstance(words, list):
            raise ContentValidationError("'words' must be a list")

        if len(words) == 0:
            raise ContentValidationError("'words' list cannot be empty")

        for i, item in enumerate(words):
            if not isinstance(item, dict):
                raise ContentValidationError(f"Word item {i} must be a dictionary")

            missing_fields = {'id', *LANGUAGES} - set(item.keys())
            if missing_fields:
                raise ContentValidationError(
                    f"Word item {i} missing required fields: {sorted(missing_fields)}"
                )

            if not isinstance(item['id'], str) or not item['id'].strip():
                raise ContentValidationError(f"Word item {i} field 'id' must be a non-empty string")

            for lang in LANGUAGES:
                text = item[lang]
                if not isinstance(text, dict):
                    raise ContentValidationError(f"Word item {i} '{lang}' must be a dictionary")
                for field in ('word', 'definition'):
                    value = text.get(field)
                    if not isinstance(value, str):
                        raise ContentValidationError(
                            f"Word item {i} '{lang}.{field}' must be a string"
                        )
                    if not value.strip():
                        raise ContentValidationError(
                            f"Word item {i} '{lang}.{field}' cannot be empty"
                        )

        # Check for duplicate IDs
        ids = [item['id'].strip() for item in words]
        if len(ids) != len(set(ids)):
            raise ContentValidationError("Duplicate word IDs found")

    def _parse_words(self, data: Dict[str, Any]) -> List[WordEntry]:
        """Parse validated YAML data into WordEntry objects."""
        entries = []
        for item in data['words']:
            entries.append(WordEntry(
                id=item['id'].strip(),
                en=WordText(item['en']['word'].strip(), item['en']['definition'].strip()),
                es=WordText(item['es']['word'].strip(), item['es']['definition'].strip()),
            ))
        return entries

    def _require_loaded(self):
        if not self._loaded:
            raise RuntimeError("No words loaded. Call load_words_from_yaml() first.")

    def get_word_by_id(self, word_id: str) -> Optional[WordEntry]:
        """
        Get a specific word by its ID.

        Args:
            word_id: The ID of the word to retrieve

        Returns:
            WordEntry if found, None otherwise
        """
        self._require_loaded()
        return self._by_id.get(word_id)

    def get_all_words(self) -> List[WordEntry]:
        """Get all loaded words in corpus order."""
        self._require_loaded()
        return self.words.copy()

    def get_word_ids(self) -> List[str]:
        self._require_loaded()
        return [entry.id for entry in self.words]

    def is_loaded(self) -> bool:
        """Check if words have been loaded."""
        return self._loaded

    def get_word_count(self) -> int:
        """Get the number of loaded words."""
        return len(self.words) if self._loaded else 0
