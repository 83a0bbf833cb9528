# graphwidget.py

from PyQt5.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsSimpleTextItem, QMessageBox, QFileDialog, QMenu
)

from PyQt5.QtCore import Qt, QPointF, QTimeLine, QRectF, pyqtSignal
from PyQt5.QtGui import QPen, QBrush, QColor, QPainter, QImage, QPainterPath, QPolygonF
from PyQt5.QtWidgets import QGraphicsScene as QGS
from utils_geom import (
    arrow_head, axis_controls, box_boundary_point, v_lerp_pts
)
import logging

logger = logging.getLogger(__name__)

# Zoom behavior constants
ZOOM_FACTOR = 1.15
ZOOM_MAX = 50.0
ZOOM_MIN = 0.02

# Animation tuning (60 FPS)
ANIM_DT_MS = 16
MOVE_ANIM_MS = 420               # node position transition after a stabilization

NODE_H = 26.0
CHAR_W = 7.5
LOOP_R = 18.0
ARROW_PX = 10.0
EDGE_COLOR = QColor(60, 60, 60)
BOX_BORDER = QColor("#2B7CE9")


def node_half_size(label: str):
    return max(24.0, 0.5 * (len(label) * CHAR_W + 16.0)), NODE_H * 0.5


class GraphWidget(QGraphicsView):
    """
    Display surface for the desktop app. The renderer calls draw(network)
    after every stabilization; the view animates from the previously painted
    positions to the new ones so the window never blocks on a jump cut.
    """
    reorganizeRequested = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        scene = QGraphicsScene(self)
        scene.setItemIndexMethod(QGS.NoIndex)
        self.setScene(scene)

        self.setRenderHint(QPainter.Antialiasing)
        self.setDragMode(QGraphicsView.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setViewportUpdateMode(QGraphicsView.SmartViewportUpdate)

        self._graph = None
        self._edgeStyle = None
        self._shown = {}          # name -> QPointF currently painted
        self._animTimeline = None
        self._firstDraw = True

    def _makeTimeline(self, duration_ms: int) -> QTimeLine:
        tl = QTimeLine(int(duration_ms), self)
        tl.setUpdateInterval(ANIM_DT_MS)
        tl.setCurveShape(QTimeLine.EaseInOutCurve)
        return tl

    # --------------------------
    # Surface protocol
    # --------------------------
    def draw(self, network):
        self._graph = network.graph
        self._edgeStyle = network.edge_style()
        post = {n: QPointF(p.x(), p.y()) for n, p in network.positions.items()}
        pre = {n: self._shown.get(n, p) for n, p in post.items()}

        if self._animTimeline and self._animTimeline.state() == QTimeLine.Running:
            self._animTimeline.stop()

        if self._firstDraw or not self.isVisible():
            self._paint(post)
            self._firstDraw = False
            self.centerGraph()
            return

        tl = self._makeTimeline(MOVE_ANIM_MS)
        tl.valueChanged.connect(lambda t: self._paint(v_lerp_pts(pre, post, t)))
        tl.finished.connect(lambda: self._paint(post))
        tl.start()
        self._animTimeline = tl

    def release(self):
        if self._animTimeline and self._animTimeline.state() == QTimeLine.Running:
            self._animTimeline.stop()
        self._animTimeline = None
        self.scene().clear()
        self._graph = None
        self._shown = {}
        self._firstDraw = True

    # --------------------------
    # Painting
    # --------------------------
    def _paint(self, positions):
        self._shown = positions
        scene = self.scene()
        scene.clear()
        if self._graph is None:
            return

        edge_pen = QPen(EDGE_COLOR)
        edge_pen.setWidthF(1.2)
        edge_pen.setCosmetic(True)
        arrow_brush = QBrush(EDGE_COLOR)
        axis = self._edgeStyle.get("forceDirection") if self._edgeStyle else None
        roundness = float(self._edgeStyle.get("roundness", 0.4)) if self._edgeStyle else 0.0

        for e in self._graph.edges:
            p1 = positions.get(e.source)
            p2 = positions.get(e.target)
            if p1 is None or p2 is None:
                continue
            hw, hh = node_half_size(e.target)
            if e.isLoop():
                c = QPointF(p1.x() + hw, p1.y() - hh)
                path = QPainterPath()
                path.addEllipse(c, LOOP_R, LOOP_R)
                tip = QPointF(c.x() - LOOP_R, c.y())
                tail = QPointF(tip.x(), tip.y() - LOOP_R)
            elif axis:
                c1, c2 = axis_controls(p1, p2, axis, roundness)
                tip = box_boundary_point(p2, c2, hw, hh)
                path = QPainterPath(p1)
                path.cubicTo(c1, c2, tip)
                tail = c2
            else:
                tip = box_boundary_point(p2, p1, hw, hh)
                path = QPainterPath(p1)
                path.lineTo(tip)
                tail = p1
            item = scene.addPath(path, edge_pen)
            item.setZValue(-10)
            left, right = arrow_head(tip, tail, size=ARROW_PX)
            head = scene.addPolygon(QPolygonF([tip, left, right]), edge_pen, arrow_brush)
            head.setZValue(-5)

        border = QPen(BOX_BORDER, 1)
        border.setCosmetic(True)
        for node in self._graph.getNodes():
            pos = positions.get(node.getName())
            if pos is None:
                continue
            hw, hh = node_half_size(node.getLabel())
            box = scene.addRect(QRectF(pos.x() - hw, pos.y() - hh, 2 * hw, 2 * hh),
                                border, QBrush(QColor(node.getFill())))
            box.setZValue(10)
            box.setToolTip(f"{node.getName()} ({node.getKind()})")

            text = QGraphicsSimpleTextItem(node.getLabel())
            r = text.boundingRect()
            text.setPos(pos.x() - r.width() / 2, pos.y() - r.height() / 2)
            text.setBrush(QColor(node.getTextColor()))
            text.setZValue(20)
            scene.addItem(text)

        br = scene.itemsBoundingRect()
        if not br.isEmpty():
            scene.setSceneRect(br.adjusted(-50, -50, 50, 50))
        self.viewport().update()

    # --------------------------
    # View helpers
    # --------------------------
    def zoomIn(self):
        if self.transform().m11() * ZOOM_FACTOR <= ZOOM_MAX:
            self.scale(ZOOM_FACTOR, ZOOM_FACTOR)

    def zoomOut(self):
        if self.transform().m11() / ZOOM_FACTOR >= ZOOM_MIN:
            self.scale(1 / ZOOM_FACTOR, 1 / ZOOM_FACTOR)

    def centerGraph(self):
        if not self.scene().items():
            return
        rect = self.scene().itemsBoundingRect().adjusted(-50, -50, 50, 50)
        if rect.width() < 1e-6 or rect.height() < 1e-6:
            return
        self.fitInView(rect, Qt.KeepAspectRatio)

    def wheelEvent(self, event):
        if event.angleDelta().y() > 0:
            self.zoomIn()
        else:
            self.zoomOut()
        event.accept()

    def contextMenuEvent(self, event):
        menu = QMenu(self)
        menu.addAction("Reorganize (Ctrl+R)", self.reorganizeRequested.emit)
        menu.addAction("Center Graph (Ctrl+L)", self.centerGraph)
        menu.addSeparator()
        menu.addAction("Export as Image...", self.exportAsImage)
        menu.exec_(event.globalPos())

    # ---------- Export ----------
    def exportAsImage(self):
        path, _ = QFileDialog.getSaveFileName(self, "Export as Image", "", "PNG Files (*.png)")
        if not path:
            return
        rect = self.scene().itemsBoundingRect().adjusted(-10, -10, 10, 10)
        if rect.isEmpty():
            QMessageBox.warning(self, "Export", "Nothing to export yet.")
            return
        w = max(1, int(rect.width()))
        h = max(1, int(rect.height()))
        image = QImage(w, h, QImage.Format_ARGB32_Premultiplied)
        image.fill(Qt.white)
        painter = QPainter(image)
        if not painter.isActive():
            QMessageBox.warning(self, "Export", "Failed to start painter for image export.")
            return
        self.scene().render(painter, target=QRectF(0, 0, w, h), source=rect)
        painter.end()
        if not image.save(path):
            logger.error("Failed to save image to %s", path)
            QMessageBox.warning(self, "Export", "Failed to save the PNG image.")
