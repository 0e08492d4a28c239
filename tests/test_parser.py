import unittest

from treebf import (
    Block,
    Comment,
    Delta,
    Move,
    Read,
    StructureError,
    TokenKind,
    Write,
    lex,
    parse,
    parse_source,
)


class LexerTests(unittest.TestCase):
    def test_one_token_per_character(self) -> None:
        source = "+-<>,.[]\n x\t"
        tokens = lex(source)
        self.assertEqual(len(tokens), len(source))
        self.assertEqual(
            [token.kind for token in tokens[:8]],
            [
                TokenKind.INCREMENT,
                TokenKind.DECREMENT,
                TokenKind.MOVE_LEFT,
                TokenKind.MOVE_RIGHT,
                TokenKind.INPUT,
                TokenKind.OUTPUT,
                TokenKind.LOOP_OPEN,
                TokenKind.LOOP_CLOSE,
            ],
        )

    def test_other_characters_become_comments_verbatim(self) -> None:
        tokens = lex("\n x\té")
        self.assertTrue(all(token.kind is TokenKind.COMMENT for token in tokens))
        self.assertEqual("".join(token.char for token in tokens), "\n x\té")

    def test_empty_source(self) -> None:
        self.assertEqual(lex(""), [])


class CoalescingTests(unittest.TestCase):
    def test_increments_collapse_into_one_delta(self) -> None:
        self.assertEqual(parse_source("+++").nodes(), [Delta(3)])

    def test_interleaved_increments_keep_net_value(self) -> None:
        self.assertEqual(parse_source("+-+-+").nodes(), [Delta(1)])

    def test_net_zero_delta_is_kept(self) -> None:
        self.assertEqual(parse_source("+-").nodes(), [Delta(0)])

    def test_long_run_does_not_truncate(self) -> None:
        self.assertEqual(parse_source("+" * 1000).nodes(), [Delta(1000)])
        self.assertEqual(parse_source("<" * 40000).nodes(), [Move(-40000)])

    def test_moves_collapse_into_one_move(self) -> None:
        self.assertEqual(parse_source(">>><").nodes(), [Move(2)])

    def test_reads_and_writes_are_never_merged(self) -> None:
        self.assertEqual(parse_source(",,").nodes(), [Read(), Read()])
        self.assertEqual(parse_source("..").nodes(), [Write(), Write()])

    def test_comments_collapse(self) -> None:
        self.assertEqual(parse_source("ab c\n").nodes(), [Comment("ab c\n")])

    def test_comment_breaks_a_run(self) -> None:
        self.assertEqual(
            parse_source("+a+>x>").nodes(),
            [Delta(1), Comment("a"), Delta(1), Move(1), Comment("x"), Move(1)],
        )

    def test_delta_and_move_do_not_merge(self) -> None:
        self.assertEqual(parse_source("+>+").nodes(), [Delta(1), Move(1), Delta(1)])


class BlockTests(unittest.TestCase):
    def test_nested_tree(self) -> None:
        program = parse_source("+[>[-]<]")
        self.assertEqual(
            program.to_tree(),
            [
                {"kind": "delta", "amount": 1},
                {
                    "kind": "block",
                    "body": [
                        {"kind": "move", "amount": 1},
                        {"kind": "block", "body": [{"kind": "delta", "amount": -1}]},
                        {"kind": "move", "amount": -1},
                    ],
                },
            ],
        )

    def test_bodies_share_one_arena(self) -> None:
        program = parse_source("[[-]]")
        self.assertEqual(program.arena, [Delta(-1), Block(0, 1), Block(1, 2)])
        self.assertEqual((program.root_start, program.root_stop), (2, 3))
        outer = program.nodes()[0]
        self.assertEqual(program.body(outer), [Block(0, 1)])
        self.assertEqual(program.body(program.body(outer)[0]), [Delta(-1)])

    def test_empty_block(self) -> None:
        program = parse_source("[]")
        block = program.nodes()[0]
        self.assertIsInstance(block, Block)
        self.assertEqual(program.body(block), [])

    def test_walk_visits_in_source_order(self) -> None:
        kinds = [type(node).__name__ for node in parse_source("+[.[,]]>").walk()]
        self.assertEqual(kinds, ["Delta", "Block", "Write", "Block", "Read", "Move"])

    def test_deep_nesting_renders_without_recursion(self) -> None:
        depth = 2000
        program = parse_source("[" * depth + "+" + "]" * depth)
        level = program.to_tree()
        for _ in range(depth):
            self.assertEqual(len(level), 1)
            self.assertEqual(level[0]["kind"], "block")
            level = level[0]["body"]
        self.assertEqual(level, [{"kind": "delta", "amount": 1}])
        self.assertEqual(sum(1 for _ in program.walk()), depth + 1)

    def test_parsing_is_deterministic(self) -> None:
        tokens = lex("++[>+<-] comment ,.[[]]")
        self.assertEqual(parse(tokens), parse(tokens))


class StructureErrorTests(unittest.TestCase):
    def test_unclosed_open(self) -> None:
        with self.assertRaises(StructureError) as ctx:
            parse_source("[")
        self.assertEqual(ctx.exception.side, "open")
        self.assertEqual(ctx.exception.offset, 0)
        self.assertIn("'['", str(ctx.exception))

    def test_unmatched_close(self) -> None:
        with self.assertRaises(StructureError) as ctx:
            parse_source("]")
        self.assertEqual(ctx.exception.side, "close")
        self.assertEqual(ctx.exception.offset, 0)
        self.assertIn("']'", str(ctx.exception))

    def test_reports_innermost_unclosed_open(self) -> None:
        with self.assertRaises(StructureError) as ctx:
            parse_source("+[[]")
        self.assertEqual(ctx.exception.offset, 1)

    def test_close_after_balanced_pair(self) -> None:
        with self.assertRaises(StructureError) as ctx:
            parse_source("[]]")
        self.assertEqual(ctx.exception.side, "close")
        self.assertEqual(ctx.exception.offset, 2)

    def test_line_and_column(self) -> None:
        with self.assertRaises(StructureError) as ctx:
            parse_source("+\n [")
        self.assertEqual((ctx.exception.line, ctx.exception.column), (2, 2))
        self.assertEqual(ctx.exception.offset, 3)
        self.assertIn("line 2, column 2", str(ctx.exception))

    def test_balance_only_depends_on_brackets(self) -> None:
        for source in ["", "[]", "[[]][]", "+[-[>]<]."]:
            parse_source(source)
        for source in ["[", "]", "][", "[[]", "[]]", "[][", "]]"]:
            with self.assertRaises(StructureError, msg=source):
                parse_source(source)


if __name__ == "__main__":
    unittest.main()
