import unittest

from codesnap.domain import Annotation, AnnotationKind
from codesnap.highlights.collection import collect_annotations, effective_priority, rank_key


class TestEffectivePriority(unittest.TestCase):
    def test_layer_defaults(self):
        self.assertEqual(effective_priority(Annotation("s", AnnotationKind.SYNTAX)), 50)
        self.assertEqual(effective_priority(Annotation("g", AnnotationKind.GRAMMAR_TOKEN)), 100)
        self.assertEqual(effective_priority(Annotation("t", AnnotationKind.SEMANTIC_TOKEN)), 200)
        self.assertEqual(effective_priority(Annotation("m", AnnotationKind.MARKER)), 200)

    def test_explicit_priority_is_kept(self):
        self.assertEqual(effective_priority(Annotation("s", AnnotationKind.SYNTAX, priority=75)), 75)
        self.assertEqual(
            effective_priority(Annotation("t", AnnotationKind.SEMANTIC_TOKEN, priority=125)), 125
        )

    def test_low_marker_priority_is_promoted(self):
        self.assertEqual(effective_priority(Annotation("m", AnnotationKind.MARKER, priority=100)), 200)
        self.assertEqual(effective_priority(Annotation("m", AnnotationKind.MARKER, priority=5)), 200)
        self.assertEqual(effective_priority(Annotation("m", AnnotationKind.MARKER, priority=101)), 101)

    def test_rank_orders_band_then_priority_then_discovery(self):
        syntax_high = Annotation("s", AnnotationKind.SYNTAX, priority=1000)
        grammar_low = Annotation("g", AnnotationKind.GRAMMAR_TOKEN, priority=1)
        self.assertGreater(rank_key(grammar_low, 0), rank_key(syntax_high, 1))
        a = Annotation("a", priority=10)
        self.assertGreater(rank_key(a, 2), rank_key(a, 1))


class TestCollectAnnotations(unittest.TestCase):
    def test_only_last_syntax_item_is_kept(self):
        out = collect_annotations(syntax=[Annotation("Outer"), Annotation("Inner")])
        self.assertEqual([a.name for a in out], ["Inner"])
        self.assertIs(out[0].kind, AnnotationKind.SYNTAX)

    def test_layers_are_tagged_in_discovery_order(self):
        out = collect_annotations(
            syntax=[Annotation("Keyword")],
            grammar=[Annotation("@keyword")],
            semantic=[Annotation("@lsp.type.keyword")],
            markers=[Annotation("Search")],
        )
        self.assertEqual(
            [(a.name, a.kind) for a in out],
            [
                ("Keyword", AnnotationKind.SYNTAX),
                ("@keyword", AnnotationKind.GRAMMAR_TOKEN),
                ("@lsp.type.keyword", AnnotationKind.SEMANTIC_TOKEN),
                ("Search", AnnotationKind.MARKER),
            ],
        )

    def test_duplicate_grammar_names_are_skipped(self):
        out = collect_annotations(grammar=[Annotation("@x", fg="#111111"), Annotation("@x", fg="#222222")])
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].fg, "#111111")

    def test_semantic_replaces_only_with_higher_priority(self):
        out = collect_annotations(
            grammar=[Annotation("@x", priority=150, fg="#111111")],
            semantic=[Annotation("@x", priority=120, fg="#222222")],
        )
        self.assertEqual(out[0].fg, "#111111")
        out = collect_annotations(
            grammar=[Annotation("@x", priority=150, fg="#111111")],
            semantic=[Annotation("@x", priority=180, fg="#222222")],
        )
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].fg, "#222222")
        self.assertIs(out[0].kind, AnnotationKind.SEMANTIC_TOKEN)

    def test_markers_always_replace(self):
        out = collect_annotations(
            grammar=[Annotation("Visual", priority=900)],
            markers=[Annotation("Visual", bg="#333333")],
        )
        self.assertEqual(len(out), 1)
        self.assertIs(out[0].kind, AnnotationKind.MARKER)
        self.assertEqual(out[0].bg, "#333333")


if __name__ == "__main__":
    unittest.main()
