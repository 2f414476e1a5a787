"""
Tests for quiz option generation
"""

import random

import pytest

from tango.core.session.distractors import DistractorGenerator
from tango.core.session.models import Direction, Word


def make_words(count: int) -> list[Word]:
    return [Word(i, f"word{i}", f"単語{i}", "中1") for i in range(1, count + 1)]


class TestDistractorGenerator:
    """Test option generation for both directions"""

    @pytest.fixture
    def generator(self):
        return DistractorGenerator(random.Random(42))

    def test_shuffle_is_a_permutation(self, generator):
        """Shuffling keeps every element exactly once and leaves the input alone"""
        items = list(range(20))
        shuffled = generator.shuffle(items)

        assert sorted(shuffled) == items
        assert items == list(range(20))

    @pytest.mark.parametrize("direction", list(Direction))
    def test_four_unique_options_including_correct(self, generator, direction):
        """Every question gets four distinct options with the right answer among them"""
        pool = make_words(10)
        for question in pool:
            options = generator.generate(question, pool, direction)

            assert len(options) == 4
            assert len(set(options)) == 4
            assert direction.answer(question) in options

    def test_options_use_answer_field_for_direction(self, generator):
        """en-to-ja options are Japanese, ja-to-en options are English"""
        pool = make_words(6)

        ja_options = generator.generate(pool[0], pool, Direction.EN_TO_JA)
        en_options = generator.generate(pool[0], pool, Direction.JA_TO_EN)

        assert all(option.startswith("単語") for option in ja_options)
        assert all(option.startswith("word") for option in en_options)

    def test_previous_answer_excluded_when_pool_allows(self):
        """The previous question's answer never shows up when there are enough other words"""
        pool = make_words(5)
        previous = pool[0]
        question = pool[1]

        for seed in range(200):
            options = DistractorGenerator(random.Random(seed)).generate(
                question, pool, Direction.EN_TO_JA, excluded_answer=previous.japanese
            )
            assert previous.japanese not in options
            assert len(set(options)) == 4

    def test_fallback_readmits_previous_answer_in_small_pool(self, generator):
        """With exactly four words the excluded answer is needed to fill the options"""
        pool = make_words(4)
        previous = pool[0]
        question = pool[1]

        options = generator.generate(
            question, pool, Direction.EN_TO_JA, excluded_answer=previous.japanese
        )

        assert len(options) == 4
        assert len(set(options)) == 4
        assert previous.japanese in options

    def test_duplicate_answer_values_are_not_repeated(self, generator):
        """Words sharing a meaning produce a single option, and never duplicate the correct one"""
        pool = [
            Word(1, "big", "大きい", "中1"),
            Word(2, "large", "大きい", "中1"),
            Word(3, "small", "小さい", "中1"),
            Word(4, "tiny", "小さい", "中1"),
            Word(5, "red", "赤い", "中1"),
            Word(6, "blue", "青い", "中1"),
        ]

        for _ in range(50):
            options = generator.generate(pool[0], pool, Direction.EN_TO_JA)
            assert len(options) == 4
            assert len(set(options)) == 4
            assert options.count("大きい") == 1

    def test_degenerate_pool_returns_fewer_options(self, generator, caplog):
        """A pool without enough distinct answers yields what it can and logs a warning"""
        pool = make_words(3)

        options = generator.generate(pool[0], pool, Direction.EN_TO_JA)

        assert sorted(options) == sorted(word.japanese for word in pool)
        assert "distinct wrong answers" in caplog.text

    def test_question_itself_is_never_a_distractor(self, generator):
        """Only the question's own answer appears once, as the correct option"""
        pool = make_words(8)
        options = generator.generate(pool[3], pool, Direction.JA_TO_EN)

        assert options.count(pool[3].english) == 1
