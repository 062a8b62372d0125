"""
Capture Module
==============

Screenshot capture and tiling engine.

Components:
- session: Explicit browser session handle (Playwright page + CDP)
- selector_resolver: Selector to top-level element handles
- viewport_scaler: Device scale factor clamping
- dom_stitcher: Reversible DOM relocation for stitch mode
- modes: Selector capture modes
- split_planner: Slice decision and cut boundaries
- executor: Screenshot calls with fallback variants
- settle: Font/image/lazy-load/live-render settling
- orchestrator: Sequencing of the whole capture
"""
