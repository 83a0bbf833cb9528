# mainwindow.py
from PyQt5.QtWidgets import (
    QMainWindow, QStatusBar, QAction, QFileDialog, QMessageBox, QDockWidget, QWidget,
    QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QGroupBox, QShortcut, QLineEdit,
    QListWidget, QComboBox, QDoubleSpinBox, QFormLayout, QColorDialog
)
from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QKeySequence, QColor
import logging

from creature import DEFAULT_COLOR
from creature_store import CreatureStore, EXPORT_FILENAME
from food_graph import build_graph
from graphwidget import GraphWidget
from layout_options import (
    GraphOptions, LayoutMode, DIRECTIONS, DIRECTION_LABELS, SORT_METHODS, configure,
    set_mode, set_spring_length, set_spring_constant, set_central_gravity,
    set_gravitational_constant, set_hierarchical_direction, set_hierarchical_sort_method,
)
from render_session import RenderSession, ReorganizeChannel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Food Web Builder")

        self.store = CreatureStore()
        self.options = GraphOptions()
        self.channel = ReorganizeChannel()
        self._color = DEFAULT_COLOR

        self.graphWidget = GraphWidget(self)
        self.setCentralWidget(self.graphWidget)
        self.session = RenderSession(self.graphWidget, self.channel)
        self.graphWidget.reorganizeRequested.connect(self.requestReorganize)

        self.setStatusBar(QStatusBar(self))

        self.createActions()
        self.createMenuBar()
        self.createControlsDock()
        self.createShortcuts()
        self.refresh()

    def createActions(self):
        self.exportAction = QAction("&Export JSON...", self, triggered=self.exportCreatures)
        self.importAction = QAction("&Import JSON...", self, triggered=self.importCreatures)
        self.imageAction = QAction("Export as &Image...", self, triggered=self.graphWidget.exportAsImage)
        self.reorganizeAction = QAction("&Reorganize Graph", self, triggered=self.requestReorganize)
        self.centerAction = QAction("&Center Graph", self, triggered=self.graphWidget.centerGraph)
        self.zoomInAction = QAction("Zoom &In", self, triggered=self.graphWidget.zoomIn)
        self.zoomOutAction = QAction("Zoom &Out", self, triggered=self.graphWidget.zoomOut)

    def createMenuBar(self):
        menuBar = self.menuBar()

        fileMenu = menuBar.addMenu("&File")
        fileMenu.addAction(self.exportAction)
        fileMenu.addAction(self.importAction)
        fileMenu.addSeparator()
        fileMenu.addAction(self.imageAction)

        viewMenu = menuBar.addMenu("&View")
        viewMenu.addAction(self.reorganizeAction)
        viewMenu.addAction(self.centerAction)
        viewMenu.addAction(self.zoomInAction)
        viewMenu.addAction(self.zoomOutAction)

    def createControlsDock(self):
        dock = QDockWidget("Controls", self)
        dock.setAllowedAreas(Qt.RightDockWidgetArea | Qt.LeftDockWidgetArea)

        mainControlsWidget = QWidget()
        mainLayout = QVBoxLayout(mainControlsWidget)
        mainLayout.setAlignment(Qt.AlignTop)

        # --- Creature form ---
        formGroup = QGroupBox("Creature")
        formLayout = QFormLayout()
        self.nameEdit = QLineEdit()
        self.nameEdit.setPlaceholderText("Enter creature name")
        self.eatsEdit = QLineEdit()
        self.eatsEdit.setPlaceholderText("Comma separated, e.g. Rabbit, Mouse")
        self.colorButton = QPushButton()
        self.colorButton.clicked.connect(self.pickColor)
        formLayout.addRow("Name", self.nameEdit)
        formLayout.addRow("Eats", self.eatsEdit)
        formLayout.addRow("Color", self.colorButton)

        buttons = QHBoxLayout()
        self.submitButton = QPushButton("Add Creature")
        self.submitButton.clicked.connect(self.submitForm)
        self.cancelButton = QPushButton("Cancel Edit")
        self.cancelButton.clicked.connect(self.cancelEdit)
        buttons.addWidget(self.submitButton)
        buttons.addWidget(self.cancelButton)
        formLayout.addRow(buttons)

        self.errorLabel = QLabel("")
        self.errorLabel.setStyleSheet("color: #c0392b")
        self.errorLabel.setWordWrap(True)
        formLayout.addRow(self.errorLabel)
        formGroup.setLayout(formLayout)

        # --- Creature list ---
        listGroup = QGroupBox("Food Web List")
        listLayout = QVBoxLayout()
        self.creatureList = QListWidget()
        self.creatureList.itemDoubleClicked.connect(lambda _item: self.startEdit())
        rowButtons = QHBoxLayout()
        btn_edit = QPushButton("Edit")
        btn_delete = QPushButton("Delete")
        btn_edit.clicked.connect(self.startEdit)
        btn_delete.clicked.connect(self.deleteCreature)
        rowButtons.addWidget(btn_edit)
        rowButtons.addWidget(btn_delete)
        listLayout.addWidget(self.creatureList)
        listLayout.addLayout(rowButtons)
        listGroup.setLayout(listLayout)

        # --- Layout ---
        layoutGroup = QGroupBox("Layout")
        layoutForm = QFormLayout()
        self.modeCombo = QComboBox()
        for m in LayoutMode:
            self.modeCombo.addItem(m.value.capitalize(), m.value)
        self.modeCombo.currentIndexChanged.connect(
            lambda _i: self.updateOption(set_mode, LayoutMode(self.modeCombo.currentData())))

        self.directionCombo = QComboBox()
        for d in DIRECTIONS:
            self.directionCombo.addItem(DIRECTION_LABELS[d], d)
        self.directionCombo.currentIndexChanged.connect(
            lambda _i: self.updateOption(set_hierarchical_direction, self.directionCombo.currentData()))
        self.sortCombo = QComboBox()
        self.sortCombo.addItems(SORT_METHODS)
        self.sortCombo.currentTextChanged.connect(
            lambda text: self.updateOption(set_hierarchical_sort_method, text))

        p = self.options.physics
        self.springLengthSpin = self._spin(10, 1000, 5, p.spring_length, set_spring_length)
        self.springConstantSpin = self._spin(0, 1, 0.01, p.spring_constant, set_spring_constant, decimals=3)
        self.centralGravitySpin = self._spin(0, 5, 0.05, p.central_gravity, set_central_gravity)
        self.gravitySpin = self._spin(0, 30000, 100, p.gravitational_constant, set_gravitational_constant)
        self.gravitySpin.setToolTip("Magnitude; applied as a negative (repelling) constant.")

        layoutForm.addRow("Mode", self.modeCombo)
        layoutForm.addRow("Direction", self.directionCombo)
        layoutForm.addRow("Sort", self.sortCombo)
        layoutForm.addRow("Spring length", self.springLengthSpin)
        layoutForm.addRow("Spring constant", self.springConstantSpin)
        layoutForm.addRow("Central gravity", self.centralGravitySpin)
        layoutForm.addRow("Gravity (-)", self.gravitySpin)
        btn_reorganize = QPushButton("Reorganize (Ctrl+R)")
        btn_reorganize.clicked.connect(self.reorganizeAction.trigger)
        layoutForm.addRow(btn_reorganize)
        layoutGroup.setLayout(layoutForm)

        mainLayout.addWidget(formGroup)
        mainLayout.addWidget(listGroup)
        mainLayout.addWidget(layoutGroup)

        dock.setWidget(mainControlsWidget)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)
        self._syncForm()

    def _spin(self, lo, hi, step, value, update, decimals=2):
        spin = QDoubleSpinBox()
        spin.setRange(lo, hi)
        spin.setSingleStep(step)
        spin.setDecimals(decimals)
        spin.setValue(value)
        spin.valueChanged.connect(lambda v: self.updateOption(update, v))
        return spin

    def createShortcuts(self):
        QShortcut(QKeySequence("Ctrl+S"), self, self.exportAction.trigger)
        QShortcut(QKeySequence("Ctrl+O"), self, self.importAction.trigger)
        QShortcut(QKeySequence("Ctrl+E"), self, self.imageAction.trigger)
        QShortcut(QKeySequence("Ctrl+R"), self, self.reorganizeAction.trigger)
        QShortcut(QKeySequence("Ctrl+L"), self, self.centerAction.trigger)
        QShortcut(QKeySequence(Qt.Key_Escape), self, self.cancelEdit)

    # --------------------------
    # Form handling
    # --------------------------
    def _syncForm(self):
        form = self.store.form
        self.nameEdit.setText(form.name)
        self.eatsEdit.setText(form.eats)
        self._setColor(form.color)
        editing = self.store.editing is not None
        self.submitButton.setText("Save Changes" if editing else "Add Creature")
        self.cancelButton.setVisible(editing)

    def _setColor(self, color):
        self._color = color
        self.colorButton.setText(color)
        self.colorButton.setStyleSheet(f"background-color: {color}")

    def pickColor(self):
        c = QColorDialog.getColor(QColor(self._color), self, "Creature Color")
        if c.isValid():
            self._setColor(c.name())

    def submitForm(self):
        name, eats = self.nameEdit.text(), self.eatsEdit.text()
        if self.store.editing is not None:
            ok = self.store.commitEdit(self.store.editing, name, eats, self._color)
        else:
            ok = self.store.add(name, eats, self._color)
        if ok:
            self._syncForm()
        self.refresh()

    def startEdit(self):
        row = self.creatureList.currentRow()
        if row < 0:
            return
        self.store.startEdit(row)
        self._syncForm()
        self.errorLabel.setText("")

    def cancelEdit(self):
        self.store.cancelEdit()
        self._syncForm()
        self.errorLabel.setText("")

    def deleteCreature(self):
        row = self.creatureList.currentRow()
        if row < 0:
            return
        removed = self.store.remove(row)
        self._syncForm()
        self.refresh()
        self.statusBar().showMessage(f"Removed {removed.name}.", 3000)

    # --------------------------
    # Layout options
    # --------------------------
    def updateOption(self, update, value):
        try:
            self.options = update(self.options, value)
        except ValueError as e:
            self.statusBar().showMessage(str(e), 4000)
            return
        self.refresh()

    def requestReorganize(self):
        # Deliver on the next event loop turn so the triggering click returns at once
        QTimer.singleShot(0, self.channel.emit)

    # --------------------------
    # Rendering
    # --------------------------
    def refresh(self):
        self.creatureList.clear()
        for c in self.store:
            self.creatureList.addItem(f"{c.name} eats {c.eats_text() or 'nothing'}")
        self.errorLabel.setText(self.store.error_message)

        hier = self.options.mode is LayoutMode.HIERARCHICAL
        custom = self.options.mode is LayoutMode.CIRCULAR
        self.directionCombo.setEnabled(hier)
        self.sortCombo.setEnabled(hier)
        for spin in (self.springLengthSpin, self.springConstantSpin,
                     self.centralGravitySpin, self.gravitySpin):
            spin.setEnabled(custom)

        graph = build_graph(self.store.creatures)
        if not self.session.update(graph, configure(self.options)):
            QMessageBox.warning(self, "Graph", f"Could not update the graph view:\n{self.session.last_error}")
        stats = graph.get_stats()
        self.statusBar().showMessage(
            f"Nodes: {stats['nodes']} (creatures={stats['creatures']}, leaf food={stats['leaf_food']}), "
            f"Edges: {stats['edges']}",
            6000
        )

    # --------------------------
    # Export / import
    # --------------------------
    def exportCreatures(self):
        path, _ = QFileDialog.getSaveFileName(self, "Export Food Web", EXPORT_FILENAME, "JSON Files (*.json)")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.store.export_snapshot())
        except OSError as e:
            logger.error("Export to %s failed: %s", path, e)
            QMessageBox.warning(self, "Error", f"Could not save the food web.\n{e}")
            return
        self.statusBar().showMessage(f"Food web saved to {path}", 5000)

    def importCreatures(self):
        path, _ = QFileDialog.getOpenFileName(self, "Import Food Web", "", "JSON Files (*.json)")
        if not path:
            return
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            logger.error("Import from %s failed: %s", path, e)
            QMessageBox.warning(self, "Error", f"Could not read the file.\n{e}")
            return
        if not self.store.import_snapshot(raw):
            self.refresh()
            return
        self._syncForm()
        self.refresh()
        self.statusBar().showMessage(f"Food web loaded from {path}", 5000)

    def closeEvent(self, event):
        self.session.close()
        super().closeEvent(event)
