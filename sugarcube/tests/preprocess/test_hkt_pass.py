# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from sugarcube.preprocess.hkt_pass import (
	HktDecl,
	find_active_decl,
	find_enclosing_scope,
	find_hkt_declarations,
	find_hkt_usages,
	find_matching_angle,
	rewrite_hkt,
)
from sugarcube.preprocess.lexical import code_skeleton


FUNCTOR = """interface Functor<F<_>> {
  map: <A, B>(fa: F<A>, f: (a: A) => B) => F<B>;
}
"""

FUNCTOR_OUT = """interface Functor<F> {
  map: <A, B>(fa: $<F, A>, f: (a: A) => B) => $<F, B>;
}
"""


def test_interface_declaration_and_usages() -> None:
	assert rewrite_hkt(FUNCTOR) == FUNCTOR_OUT


def test_other_interfaces_are_not_touched() -> None:
	other = "\ninterface Other<G> {\n  get: <A>(ga: G<A>) => A;\n}\n"
	assert rewrite_hkt(FUNCTOR + other) == FUNCTOR_OUT + other


def test_usage_after_scope_is_not_rewritten() -> None:
	tail = "type Outside = F<number>;\n"
	assert rewrite_hkt(FUNCTOR + tail) == FUNCTOR_OUT + tail


def test_function_scope_covers_params_and_return_type() -> None:
	src = "function lift<F<_>>(fa: F<number>): F<string> { return fa as any; }"
	assert rewrite_hkt(src) == "function lift<F>(fa: $<F, number>): $<F, string> { return fa as any; }"


def test_nested_applications() -> None:
	assert rewrite_hkt("type Twice<F<_>, A> = F<F<A>>;") == "type Twice<F, A> = $<F, $<F, A>>;"


def test_usage_inside_ordinary_generic() -> None:
	src = "interface Box<F<_>> { items: Array<F<string>>; }"
	assert rewrite_hkt(src) == "interface Box<F> { items: Array<$<F, string>>; }"


def test_multi_parameter_constructor() -> None:
	src = "interface Bifunctor<P<_, _>> { bimap: <A, B>(p: P<A, B>) => P<B, A>; }"
	assert rewrite_hkt(src) == "interface Bifunctor<P> { bimap: <A, B>(p: $<P, A, B>) => $<P, B, A>; }"


def test_identifier_suffix_is_not_a_usage() -> None:
	src = "interface K<F<_>> { a: MyF<A>; b: F<A>; }"
	assert rewrite_hkt(src) == "interface K<F> { a: MyF<A>; b: $<F, A>; }"


def test_text_without_declarations_is_unchanged() -> None:
	src = "const xs: Array<number> = [];\ninterface Box<T> { value: T }\n"
	assert rewrite_hkt(src) == src


def test_strings_and_comments_are_not_declarations() -> None:
	src = '// F<_>\nconst s = "F<_> F<A>";\nconst t = `G<_>`;\n'
	assert rewrite_hkt(src) == src


def test_find_hkt_declarations_records_removal_and_scope() -> None:
	src = "a;\ntype T<F<_>> = F<x>;\nb"
	decls = find_hkt_declarations(code_skeleton(src))
	assert len(decls) == 1
	decl = decls[0]
	assert decl.name == "F"
	assert src[decl.remove_start : decl.remove_end] == "<_>"
	assert decl.scope_start == 2
	assert decl.scope_end == src.index(";\nb") + 1


def test_find_enclosing_scope_block() -> None:
	src = "x; interface I<F<_>> { a: F<A>; b: { c: 1 }; }\nrest"
	start, end = find_enclosing_scope(src, src.index("F<_>"))
	assert start == 2
	assert src[end - 1] == "}" and src[end:] == "\nrest"


def test_find_enclosing_scope_defaults_to_buffer() -> None:
	src = "type T<F<_>> = F<x>"
	assert find_enclosing_scope(src, 7) == (0, len(src))


def test_find_matching_angle() -> None:
	assert find_matching_angle("F<G<A>>", 1) == 6
	assert find_matching_angle("F<(a: A) => B>", 1) == 13
	assert find_matching_angle("A < b; c > d", 2) is None
	assert find_matching_angle("F<{ a: A }>", 1) is None
	assert find_matching_angle("F<A", 1) is None


def test_find_active_decl_prefers_narrowest_scope() -> None:
	wide = HktDecl("F", 0, 0, 0, 100)
	narrow = HktDecl("F", 0, 0, 10, 20)
	other = HktDecl("G", 0, 0, 0, 100)
	decls = [wide, narrow, other]
	assert find_active_decl(decls, "F", 15) is narrow
	assert find_active_decl(decls, "F", 20) is narrow
	assert find_active_decl(decls, "F", 50) is wide
	assert find_active_decl(decls, "H", 5) is None


def test_find_hkt_usages_skips_placeholders() -> None:
	sk = code_skeleton(FUNCTOR)
	decls = find_hkt_declarations(sk)
	usages = find_hkt_usages(sk, decls)
	assert [FUNCTOR[u.start : u.end] for u in usages] == ["F<A>", "F<B>"]
	assert [FUNCTOR[u.args_start : u.args_end] for u in usages] == ["A", "B"]
	assert find_hkt_usages(sk, []) == []


def test_rewrite_is_idempotent() -> None:
	once = rewrite_hkt(FUNCTOR)
	assert rewrite_hkt(once) == once
