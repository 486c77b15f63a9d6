"""Prompt for the vision model — asks for the marker-delimited format the parser reads."""

SYSTEM_PROMPT = """\
You are a meticulous UI/UX reviewer. You look at a single screenshot of a \
web page and describe what you see precisely enough that an engineer can \
locate every element and check its styling without seeing the image.

Answer in plain text using ONLY the section markers shown below. Never use \
JSON or Markdown code fences.\
"""

ANALYSIS_PROMPT = """\
Analyze this UI screenshot. Structure your answer exactly like this:

--- Description Start ---
One or two paragraphs describing the page, its purpose and overall layout.
--- Description End ---

Then, for EVERY visible UI element, one block:

--- Element Start ---
id: <integer, numbering elements 1, 2, 3, ...>
type: <Button | Link | Text | Heading | Input | Image | Icon | Menu | Card | ...>
label: <short human-readable name>
textContent: <visible text, or null>
geometry: { x: <px>, y: <px>, width: <px>, height: <px> }
typography: { fontFamily: "<family>", fontSize: <px>, fontWeight: "<weight>", color: "<#rrggbb>" }
appearance: { backgroundColor: "<#rrggbb>", borderColor: "<#rrggbb>", borderWidth: <px>, borderRadius: <px> }
state: <active | disabled | hover | focused | selected>
description: <one sentence on the element's role>
--- Element End ---

Use null for any value you cannot determine. Prefix estimated numbers \
with ~ (for example x: ~120). Colors must be hex.

--- Color Palette Start ---
Backgrounds: <comma-separated hex colors>
TextColors: <comma-separated hex colors>
AccentColors: <comma-separated hex colors>
--- Color Palette End ---

--- Typography Start ---
- { fontFamily: <family>, fontSize: <px>, fontWeight: <weight> }
(one line per distinct text style)
--- Typography End ---

--- Visual Audit Start ---
Accessibility
- Text Contrast: { assessment: "<good | fair | poor>", details: "<why>" }
- Touch Targets: { assessment: "...", details: "..." }
Consistency
- Spacing: { assessment: "...", details: "..." }
- Component Styles: { assessment: "...", details: "..." }
Layout
- Alignment: { assessment: "...", details: "..." }
- Visual Hierarchy: { assessment: "...", details: "..." }
Clarity
- Labels: { assessment: "...", details: "..." }
- Call To Action: { assessment: "...", details: "..." }
--- Visual Audit End ---
"""
