"""
Rendering Module
===============

SVG rasterization and PNG creation.

Components:
- dimensions: DPI parsing and target pixel size resolution
- rasterizer: CairoSVG-backed rasterization into RGBA pixel buffers
- png_encoder: Pillow-backed PNG encoding with a pHYs chunk
- transparency: ImageMagick-backed transparent conversion through temporary files
"""
