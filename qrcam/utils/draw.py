import cv2

def draw_lines(frame, lines, origin=(20, 40), color=(255, 255, 255), step=28, scale=0.7):
    x, y = origin
    for line in lines:
        cv2.putText(frame, str(line), (x, y),
                    cv2.FONT_HERSHEY_SIMPLEX, scale, color, 2, cv2.LINE_AA)
        y += step
    return frame
