"""
Unit tests for result assembly.
"""

import numpy as np

from palette_engine.services.colors.assembly import ColorCluster, assemble_colors, build_clusters
from palette_engine.services.colors.color_model import RGBColor
from palette_engine.services.colors.kmeans import KMeansResult


def make_result(centroids, counts):
    labels = np.repeat(np.arange(len(counts)), counts)
    return KMeansResult(
        centroids=np.array(centroids, dtype=np.float64),
        labels=labels,
        iterations=1,
        converged=True,
    )


class TestBuildClusters:
    """Test percentage computation"""

    def test_percentages(self):
        result = make_result([(255, 0, 0), (0, 255, 0), (0, 0, 255)], [50, 30, 20])
        clusters = build_clusters(result)

        assert [c.percentage for c in clusters] == [50.0, 30.0, 20.0]
        assert [c.sample_count for c in clusters] == [50, 30, 20]
        assert clusters[1].centroid.to_hex() == "#00FF00"

    def test_empty_cluster_has_zero_percentage(self):
        result = make_result([(255, 0, 0), (0, 0, 255)], [10, 0])
        clusters = build_clusters(result)
        assert clusters[1].percentage == 0.0


class TestAssembleColors:
    """Test filtering and ordering"""

    def test_sorted_descending(self):
        clusters = [
            ColorCluster(RGBColor(0, 0, 255), 20.0, 20),
            ColorCluster(RGBColor(255, 0, 0), 50.0, 50),
            ColorCluster(RGBColor(0, 255, 0), 30.0, 30),
        ]
        colors = assemble_colors(clusters)

        assert [c.hex_code for c in colors] == ["#FF0000", "#00FF00", "#0000FF"]
        assert [c.percentage for c in colors] == [50.0, 30.0, 20.0]

    def test_immaterial_clusters_dropped(self):
        """Clusters at or below 0.1% are dropped"""
        result = make_result([(255, 0, 0), (0, 255, 0), (0, 0, 255)], [998, 1, 1])
        colors = assemble_colors(build_clusters(result))

        assert len(colors) == 1
        assert colors[0].hex_code == "#FF0000"
        assert colors[0].percentage == 99.8

    def test_just_above_threshold_kept(self):
        result = make_result([(255, 0, 0), (0, 0, 255)], [998, 2])
        colors = assemble_colors(build_clusters(result))
        assert [c.hex_code for c in colors] == ["#FF0000", "#0000FF"]

    def test_ties_keep_centroid_order(self):
        clusters = [
            ColorCluster(RGBColor(10, 10, 10), 25.0, 1),
            ColorCluster(RGBColor(20, 20, 20), 50.0, 2),
            ColorCluster(RGBColor(30, 30, 30), 25.0, 1),
        ]
        colors = assemble_colors(clusters)
        assert [c.hex_code for c in colors] == ["#141414", "#0A0A0A", "#1E1E1E"]

    def test_custom_threshold(self):
        clusters = [ColorCluster(RGBColor(0, 0, 0), 4.0, 4), ColorCluster(RGBColor(1, 1, 1), 96.0, 96)]
        assert len(assemble_colors(clusters, materiality_threshold=5.0)) == 1

    def test_namer_applied(self):
        clusters = [ColorCluster(RGBColor(255, 0, 0), 100.0, 1)]
        colors = assemble_colors(clusters, namer=lambda rgb: rgb.to_hex().lower())
        assert colors[0].name == "#ff0000"

    def test_hsl_matches_rgb(self):
        clusters = [ColorCluster(RGBColor(78, 205, 196), 100.0, 1)]
        color = assemble_colors(clusters)[0]
        assert color.hsl == color.rgb.to_hsl()
