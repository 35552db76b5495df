import unittest

from codesnap.domain import Annotation, AnnotationKind, Style, Theme
from codesnap.highlights.resolver import StyleCache, StyleResolver

RED = "#ff0000"
GREEN = "#00ff00"
BLUE = "#0000ff"


class TestStyleResolver(unittest.TestCase):
    def setUp(self):
        self.theme = Theme(fg_color="#ffffff", bg_color="#000000")
        self.resolver = StyleResolver(self.theme)

    def test_empty_input_resolves_to_none(self):
        self.assertIsNone(self.resolver.resolve([]))

    def test_default_is_theme_normal(self):
        resolved = self.resolver.resolve_or_default([])
        self.assertEqual(resolved.style_name, "Normal")
        self.assertEqual(resolved.style, Style(fg="#ffffff", bg="#000000"))

    def test_attributes_inherit_across_priorities(self):
        a = Annotation("A", priority=50, fg=RED)
        b = Annotation("B", priority=100, bg=BLUE)
        resolved = self.resolver.resolve([a, b])
        self.assertEqual(
            resolved.style,
            Style(fg=RED, bg=BLUE, bold=False, italic=False, underline=False),
        )
        self.assertEqual(resolved.style_name, "B")

    def test_equal_priority_later_discovery_wins(self):
        a = Annotation("A", priority=100, fg=RED)
        b = Annotation("B", priority=100, fg=GREEN)
        resolved = self.resolver.resolve([a, b])
        self.assertEqual(resolved.style.fg, GREEN)
        self.assertEqual(resolved.style_name, "B")

    def test_layers_merge_by_band(self):
        syntax = Annotation("Keyword", AnnotationKind.SYNTAX, priority=50, bold=True)
        grammar = Annotation("@keyword", AnnotationKind.GRAMMAR_TOKEN, priority=100, fg=GREEN)
        marker = Annotation("Search", AnnotationKind.MARKER, bg=BLUE)
        resolved = self.resolver.resolve([syntax, grammar, marker])
        self.assertEqual(
            resolved.style,
            Style(fg=GREEN, bg=BLUE, bold=True, italic=False, underline=False),
        )
        self.assertEqual(resolved.style_name, "Search")

    def test_band_outranks_raw_priority(self):
        grammar = Annotation("@string", AnnotationKind.GRAMMAR_TOKEN, priority=500, fg=RED)
        semantic = Annotation("@lsp.type.string", AnnotationKind.SEMANTIC_TOKEN, priority=10, fg=GREEN)
        resolved = self.resolver.resolve([grammar, semantic])
        self.assertEqual(resolved.style.fg, GREEN)

    def test_explicit_false_is_not_unset(self):
        top = Annotation("Top", priority=200, bold=False)
        low = Annotation("Low", priority=10, bold=True)
        self.assertFalse(self.resolver.resolve([low, top]).style.bold)

    def test_unset_colors_fall_back_to_theme(self):
        resolved = self.resolver.resolve([Annotation("Bold", bold=True)])
        self.assertEqual(resolved.style.fg, "#ffffff")
        self.assertEqual(resolved.style.bg, "#000000")
        self.assertTrue(resolved.style.bold)

    def test_integer_colors_are_normalized(self):
        resolved = self.resolver.resolve([Annotation("Int", fg=0xFF0000)])
        self.assertEqual(resolved.style.fg, RED)

    def test_resolution_is_idempotent(self):
        anns = [
            Annotation("A", priority=50, fg=RED, italic=True),
            Annotation("B", AnnotationKind.MARKER, underline=True),
        ]
        self.assertEqual(self.resolver.resolve(anns), self.resolver.resolve(anns))


class TestStyleCache(unittest.TestCase):
    def test_cache_hits_on_repeated_input(self):
        cache = StyleCache()
        resolver = StyleResolver(Theme(), cache)
        anns = [Annotation("A", fg=RED)]
        first = resolver.resolve(anns)
        second = resolver.resolve(list(anns))
        self.assertEqual(first, second)
        self.assertEqual(len(cache), 1)
        self.assertEqual(cache.misses, 1)
        self.assertEqual(cache.hits, 1)

    def test_caches_are_not_shared(self):
        one, two = StyleCache(), StyleCache()
        StyleResolver(Theme(), one).resolve([Annotation("A", fg=RED)])
        self.assertEqual(len(one), 1)
        self.assertEqual(len(two), 0)

    def test_cached_and_uncached_agree(self):
        anns = [Annotation("A", priority=50, fg=RED), Annotation("B", priority=100, bg=BLUE)]
        cached = StyleResolver(Theme(), StyleCache()).resolve(anns)
        plain = StyleResolver(Theme()).resolve(anns)
        self.assertEqual(cached, plain)


if __name__ == "__main__":
    unittest.main()
