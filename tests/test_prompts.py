"""Tests for the prompt catalog."""

from social_copy.embeddings.prompts import (
    PLATFORMS,
    compose_prompts,
    facebook_prompt,
    references_block,
    twitter_prompt,
    wpp_prompt,
)
from social_copy.storage.pinecone_storage import MatchResult

EXAMPLES = [
    MatchResult("1", 0.95, {"noticia": "Sube la nafta", "copy": "⛽ Otra suba de la nafta"}),
    MatchResult("2", 0.90, {"noticia": "Baja el dólar", "copy": "💵 El dólar afloja"}),
]


class TestReferencesBlock:

    def test_empty_examples(self):
        assert references_block([]) == ""

    def test_lists_each_example(self):
        block = references_block(EXAMPLES)
        assert block.startswith("Aquí hay algunos copies de Facebook anteriores (2 más similares):")
        assert 'Ejemplo 1:\n  Título: "Sube la nafta"\n  FB Copy: "⛽ Otra suba de la nafta"' in block
        assert 'Ejemplo 2:' in block

    def test_copy_only(self):
        block = references_block(EXAMPLES, fields=["copy"])
        assert "FB Copy:" in block
        assert "Título:" not in block

    def test_unknown_fields_ignored(self):
        block = references_block(EXAMPLES, fields=["noticia", "score"])
        assert "Título:" in block
        assert "FB Copy:" not in block


class TestTemplates:

    def test_facebook_without_references(self):
        prompt = facebook_prompt("Sube el dólar")
        assert prompt.startswith("Crea un copy de Facebook")
        assert 'Título de la noticia: "Sube el dólar"' in prompt
        assert "Descripción" not in prompt

    def test_facebook_with_references(self):
        refs = references_block(EXAMPLES)
        prompt = facebook_prompt("Sube el dólar", "Tercer día al alza", refs)
        assert prompt.startswith("Basándote en estos copies de Facebook")
        assert prompt.index(refs) < prompt.index("Título de la noticia")
        assert 'Descripción: "Tercer día al alza"' in prompt

    def test_twitter_and_wpp(self):
        assert "tweet breve (máx. 10 palabras)" in twitter_prompt("T")
        assert "WhatsApp" in wpp_prompt("T")

    def test_title_is_sanitized(self):
        prompt = twitter_prompt("Título\x00 con ```código```")
        assert "\x00" not in prompt
        assert "```" not in prompt


class TestComposePrompts:

    def test_one_prompt_per_platform(self):
        prompts = compose_prompts("Sube el dólar")
        assert set(prompts) == set(PLATFORMS)

    def test_references_only_for_rag_platforms(self):
        prompts = compose_prompts("Sube el dólar", examples=EXAMPLES)
        assert "Ejemplo 1" in prompts["facebook"]
        assert "Ejemplo 1" not in prompts["twitter"]
        assert "Ejemplo 1" not in prompts["wpp"]

    def test_references_for_all_platforms(self):
        prompts = compose_prompts("Sube el dólar", examples=EXAMPLES, rag_platforms=PLATFORMS)
        assert all("Ejemplo 2" in prompt for prompt in prompts.values())
