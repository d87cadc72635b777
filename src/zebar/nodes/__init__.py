"""Template tree nodes.

All nodes are frozen dataclasses: a parsed tree is immutable and may be
cached and rendered concurrently with different bindings.

Node Types:
    Template structure: TemplateTree
    Output: Text, Interpolation
    Control flow: Conditional, Loop, Switch
    Expressions: Const, Name, List, Dict, Getattr, Getitem, FuncCall,
        BinOp, UnaryOp, Compare, BoolOp, CondExpr, NullCoalesce
"""

from zebar.nodes.base import Node
from zebar.nodes.control_flow import Branch, Conditional, Loop, Switch
from zebar.nodes.expressions import (
    BinOp,
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Expr,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    NullCoalesce,
    UnaryOp,
)
from zebar.nodes.output import Interpolation, Text
from zebar.nodes.structure import TemplateTree

__all__ = [
    "BinOp",
    "BoolOp",
    "Branch",
    "Compare",
    "CondExpr",
    "Conditional",
    "Const",
    "Dict",
    "Expr",
    "FuncCall",
    "Getattr",
    "Getitem",
    "Interpolation",
    "List",
    "Loop",
    "Name",
    "Node",
    "NullCoalesce",
    "Switch",
    "TemplateTree",
    "Text",
    "UnaryOp",
]
