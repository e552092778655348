"""Extract plain text from Cotejo AST nodes.

Used for heading identifiers, section titles and image alt text.

Example:
    >>> from cotejo import parse, extract_text
    >>> doc = parse("# Hello **World**")
    >>> extract_text(doc.children[0])
    'Hello World'
"""

from cotejo.nodes import (
    BlockQuote,
    CodeBlock,
    Document,
    Emphasis,
    FrontMatter,
    Heading,
    Image,
    InlineCode,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    SoftBreak,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)


def extract_text(node: Node) -> str:
    """Extract plain text from any AST node.

    Recursively walks the tree, concatenating text content. LineBreak and
    SoftBreak contribute a space; front matter and thematic breaks contribute
    nothing.

    Args:
        node: Any AST node (block or inline).

    Returns:
        Concatenated plain text from the node and its descendants.

    """
    match node:
        case Text():
            return node.content
        case InlineCode():
            return node.code
        case Image():
            return node.alt
        case LineBreak() | SoftBreak():
            return " "
        case CodeBlock():
            return node.code
        case Emphasis() | Link() | Paragraph() | Heading() | TableCell():
            return "".join(extract_text(c) for c in node.children)
        case BlockQuote() | List() | ListItem() | Document() | Table() | TableRow():
            return " ".join(extract_text(c) for c in node.children)
        case FrontMatter() | ThematicBreak():
            return ""
        case _:
            return ""
