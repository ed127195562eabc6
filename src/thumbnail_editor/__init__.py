"""
Interactive thumbnail editor for 1280x720 YouTube thumbnails.

Modules:
  colors      - hex parsing, WCAG luminance/contrast, image color sampling
  elements    - text / rect / circle / arrow / badge records and factories
  scene       - ordered element sequence (order = z-order) and selection
  transform   - folds interactive resize/rotate into element fields
  analysis    - effectiveness score and suggestions for a composition
  background  - background settings, image loading and uploads
  compositor  - Pillow renderer, hit-testing, guides and PNG export
  presets     - style presets and quick color swatches
  editor      - editor session tying the pieces together
  config      - .env + JSON configuration
  server      - MCP tool server over one editor session
"""
